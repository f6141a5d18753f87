"""
Scraping des notes publiques IMDb et Letterboxd.

Implemente IRatingsProvider par analyse HTML (BeautifulSoup) de chemins
DOM fixes. Ces chemins dependent de la mise en page des sites : une note
introuvable retourne None, une erreur reseau leve ProviderUnavailableError.

Usage:
    scraper = RatingsScraper()
    imdb = await scraper.get_imdb_rating("tt0133093")
    letterboxd = await scraper.get_letterboxd_rating("tt0133093")
    await scraper.close()
"""

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from cinesync.adapters.api.retry import provider_errors, request_with_retry
from cinesync.core.ports.api_clients import IRatingsProvider

IMDB_TITLE_URL = "https://www.imdb.com/title/{imdb_id}/"
IMDB_RATING_SELECTORS = (
    "#__next > main > div > section > section > div:nth-child(4) > section > "
    "section > div > div > div > div:nth-child(1) > a > div > div > div > div > span",
    "[data-testid='hero-rating-bar__aggregate-rating__score'] > span",
)

LETTERBOXD_BASE_URL = "https://letterboxd.com"
LETTERBOXD_SEARCH_URL = LETTERBOXD_BASE_URL + "/search/films/{imdb_id}/"
LETTERBOXD_SEARCH_RESULT_SELECTOR = "#content > div > div > section > ul > li:nth-child(1) > div"
LETTERBOXD_HISTOGRAM_URL = LETTERBOXD_BASE_URL + "/csi{film_url}rating-histogram/"
LETTERBOXD_RATING_SELECTOR = "a.display-rating"
LETTERBOXD_TMDB_LINK_SELECTOR = "a[data-track-action=TMDb]"

_TMDB_MOVIE_LINK = re.compile(r"/movie/(\d+)")
_RATING_NUMBER = re.compile(r"\d+(?:[.,]\d+)?")


def _parse_rating(text: Optional[str]) -> Optional[float]:
    """Extrait le premier nombre d'un texte de note ("7,8" ou "3.9")."""
    if not text:
        return None
    match = _RATING_NUMBER.search(text)
    if match is None:
        return None
    return float(match.group(0).replace(",", "."))


class RatingsScraper(IRatingsProvider):
    """
    Source des notes IMDb et Letterboxd par scraping HTML.

    Chaque appel ouvre une page puis applique un selecteur CSS fixe.
    """

    USER_AGENT = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    )

    def __init__(self, timeout: float = 30.0) -> None:
        """
        Initialise le scraper.

        Args:
            timeout: Timeout de chaque requete en secondes
        """
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le cree si necessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={
                    "User-Agent": self.USER_AGENT,
                    "Accept-Language": "en-US,en;q=0.9",
                },
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._client

    async def _fetch_soup(self, source: str, url: str) -> BeautifulSoup:
        """
        Telecharge une page et la parse.

        Raises:
            ProviderUnavailableError: Erreur reseau ou statut HTTP en echec
        """
        async with provider_errors(source):
            response = await request_with_retry(self._get_client(), "GET", url)
        return BeautifulSoup(response.text, "html.parser")

    async def get_imdb_rating(self, imdb_id: str) -> Optional[float]:
        """
        Recupere la note IMDb d'un film (sur 10).

        Args:
            imdb_id: ID IMDb (format ttXXXXXXX)

        Returns:
            Note, ou None si l'element est absent de la page
        """
        soup = await self._fetch_soup("imdb", IMDB_TITLE_URL.format(imdb_id=imdb_id))
        for selector in IMDB_RATING_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                return _parse_rating(element.get_text(strip=True))

        logger.debug(f"Note IMDb introuvable pour {imdb_id}")
        return None

    async def get_letterboxd_rating(self, imdb_id: str) -> Optional[float]:
        """
        Recupere la note Letterboxd d'un film (sur 5).

        Recherche le film par son ID IMDb, puis lit le fragment
        d'histogramme des notes de sa page.

        Args:
            imdb_id: ID IMDb (format ttXXXXXXX)

        Returns:
            Note, ou None si le film ou la note est introuvable
        """
        search = await self._fetch_soup(
            "letterboxd", LETTERBOXD_SEARCH_URL.format(imdb_id=imdb_id)
        )
        result = search.select_one(LETTERBOXD_SEARCH_RESULT_SELECTOR)
        film_url = result.get("data-target-link") if result is not None else None
        if not film_url:
            logger.debug(f"Film Letterboxd introuvable pour {imdb_id}")
            return None

        histogram = await self._fetch_soup(
            "letterboxd", LETTERBOXD_HISTOGRAM_URL.format(film_url=film_url)
        )
        rating = histogram.select_one(LETTERBOXD_RATING_SELECTOR)
        if rating is None:
            return None
        return _parse_rating(rating.get_text(strip=True))

    async def get_tmdb_id_from_letterboxd(self, url: str) -> Optional[int]:
        """
        Lit l'ID TMDB reference par une page film Letterboxd.

        Args:
            url: URL de la page film (ex: https://letterboxd.com/film/the-matrix/)

        Returns:
            ID TMDB, ou None si le lien TMDB est absent
        """
        soup = await self._fetch_soup("letterboxd", url)
        link = soup.select_one(LETTERBOXD_TMDB_LINK_SELECTOR)
        href = link.get("href") if link is not None else None
        if not href:
            return None

        match = _TMDB_MOVIE_LINK.search(href)
        return int(match.group(1)) if match else None

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
