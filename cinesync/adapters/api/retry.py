"""
Mecanisme de retry et traduction des erreurs HTTP.

Gere automatiquement les erreurs 429 (rate limiting) en relancant
les requetes avec un delai croissant et du jitter aleatoire, puis
traduit les echecs restants en ProviderUnavailableError pour que les
services n'aient jamais a connaitre httpx.

Usage:
    async with provider_errors("tmdb"):
        response = await request_with_retry(client, "GET", url)
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from cinesync.core.errors import ProviderUnavailableError


class RateLimitError(Exception):
    """
    Exception levee quand la source retourne 429 Too Many Requests.

    Attributes:
        retry_after: Nombre de secondes a attendre (header Retry-After),
                     ou None si non specifie.
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


def with_retry(max_attempts: int = 5, max_wait: int = 60):
    """
    Decorateur pour relancer sur RateLimitError avec backoff exponentiel.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 5)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 60)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception_type(RateLimitError),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Convertit le header Retry-After en secondes (None si absent ou date HTTP)."""
    if value is None or not value.strip().isdigit():
        return None
    return int(value)


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec retry automatique sur 429.

    Les autres erreurs HTTP (4xx, 5xx) sont propagees immediatement.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST, etc.)
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives (defaut: 5)
        **kwargs: Arguments supplementaires passes a client.request()

    Returns:
        httpx.Response en cas de succes

    Raises:
        RateLimitError: Si 429 apres epuisement des tentatives
        httpx.HTTPStatusError: Pour les autres erreurs HTTP
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code == 429:
            raise RateLimitError(_parse_retry_after(response.headers.get("Retry-After")))
        response.raise_for_status()
        return response

    return await _do_request()


@asynccontextmanager
async def provider_errors(source: str) -> AsyncIterator[None]:
    """
    Traduit les erreurs reseau, de rate limiting et de reponse mal formee
    en ProviderUnavailableError.

    Utilisable en bloc `async with` ou en decorateur de methode async.

    Args:
        source: Identifiant de la source ("tmdb", "imdb", "letterboxd")

    Raises:
        ProviderUnavailableError: Pour toute erreur httpx, RateLimitError,
            corps non JSON ou charge utile incomplete
    """
    try:
        yield
    except RateLimitError as e:
        raise ProviderUnavailableError(source, str(e)) from e
    except httpx.HTTPError as e:
        raise ProviderUnavailableError(source, f"{type(e).__name__}: {e}") from e
    except (ValueError, KeyError, TypeError) as e:
        raise ProviderUnavailableError(source, f"reponse invalide ({type(e).__name__}: {e})") from e
