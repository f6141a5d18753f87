"""
Cache persistant pour les sources externes avec TTL differencies.

Le cache utilise diskcache pour la persistence sur disque, ce qui permet
de conserver les reponses entre les redemarrages du daemon.

TTL par defaut:
- Recherches (SEARCH_TTL): 24 heures
- Details, credits, dates de sortie, personnes (DETAILS_TTL): 7 jours
"""

import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, Optional

from diskcache import Cache


class APICache:
    """
    Cache asynchrone avec TTL pour les appels API.

    Utilise diskcache pour la persistence et run_in_executor pour
    les operations asynchrones non-bloquantes. Les valeurs stockees sont
    les charges JSON brutes des reponses.

    Example:
        cache = APICache(cache_dir=".cache/api")
        data = await cache.get_or_fetch("tmdb:movie:27205", APICache.DETAILS_TTL, fetch)
    """

    SEARCH_TTL = 24 * 60 * 60  # 24 heures
    DETAILS_TTL = 7 * 24 * 60 * 60  # 7 jours

    def __init__(self, cache_dir: str = ".cache/api") -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(str(cache_dir))

    async def get(self, key: str) -> Optional[Any]:
        """Recupere une valeur du cache (None si absente ou expiree)."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Stocke une valeur dans le cache avec un TTL en secondes."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def get_or_fetch(
        self,
        key: str,
        ttl: int,
        fetch: Callable[[], Awaitable[Optional[Any]]],
    ) -> Optional[Any]:
        """
        Retourne la valeur en cache, ou l'obtient via fetch et la stocke.

        Les valeurs None (ressource inconnue) ne sont pas mises en cache.

        Args:
            key: Cle unique (ex: "tmdb:movie:27205")
            ttl: Duree de vie en secondes
            fetch: Coroutine produisant la valeur en cas d'absence

        Returns:
            La valeur en cache ou obtenue, ou None
        """
        cached = await self.get(key)
        if cached is not None:
            return cached

        value = await fetch()
        if value is not None:
            await self.set(key, value, ttl)
        return value

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
