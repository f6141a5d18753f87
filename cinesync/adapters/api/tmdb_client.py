"""
Client TMDB pour la recherche et recuperation de metadonnees films.

Implemente l'interface IMetadataProvider pour TMDB (The Movie Database).
Utilise le cache persistant et le mecanisme de retry pour gerer
le rate limiting. Les erreurs reseau sont traduites en
ProviderUnavailableError.

Usage:
    cache = APICache()
    client = TMDBClient(api_key="your_key", cache=cache)
    results = await client.search("Avatar", year=2009)
    details = await client.get_details(19995)
    await client.close()
"""

from typing import Any, Optional

import httpx

from cinesync.adapters.api.cache import APICache
from cinesync.adapters.api.retry import provider_errors, request_with_retry
from cinesync.core.entities import Person
from cinesync.core.ports.api_clients import (
    CastMember,
    CountryReleases,
    Credits,
    CrewMember,
    FilmDetails,
    IMetadataProvider,
    SearchResult,
)


class TMDBClient(IMetadataProvider):
    """
    Client API TMDB pour les metadonnees de films.

    Implemente IMetadataProvider avec:
    - Recherche de films par titre (avec indice d'annee optionnel)
    - Details, credits, dates de sortie et personnes
    - Recherche par ID IMDb
    - Cache persistant (24h recherches, 7j pour le reste)
    - Retry automatique sur rate limiting (429)

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"

    def __init__(
        self,
        api_key: str,
        cache: APICache,
        language: str = "en-US",
        timeout: float = 30.0,
    ) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API TMDB (v3) ou Read Access Token (v4)
            cache: Instance APICache pour le caching des reponses
            language: Langue des titres et resumes
            timeout: Timeout de chaque requete en secondes
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer
        """
        if self._client is None or self._client.is_closed:
            is_v4_token = len(self._api_key) > 40

            headers = {"Accept": "application/json"}
            params = {}

            if is_v4_token:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=self._timeout,
            )
        return self._client

    @property
    def source(self) -> str:
        """Retourne l'identifiant de la source API."""
        return "tmdb"

    async def _get_json(
        self,
        path: str,
        cache_key: str,
        ttl: int,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[dict]:
        """
        GET cache-first d'une ressource TMDB.

        Args:
            path: Chemin relatif a l'API (ex: "/movie/27205")
            cache_key: Cle de cache de la reponse
            ttl: Duree de vie en cache
            params: Parametres de requete

        Returns:
            Charge JSON, ou None si la ressource n'existe pas (404)

        Raises:
            ProviderUnavailableError: Erreur reseau, HTTP ou rate limiting
        """

        async def fetch() -> Optional[dict]:
            client = self._get_client()
            async with provider_errors(self.source):
                try:
                    response = await request_with_retry(
                        client, "GET", path, params=params or {}
                    )
                except httpx.HTTPStatusError as e:
                    if e.response.status_code == 404:
                        return None
                    raise
                return response.json()

        return await self._cache.get_or_fetch(cache_key, ttl, fetch)

    @provider_errors("tmdb")
    async def search(
        self,
        query: str,
        year: Optional[int] = None,
    ) -> list[SearchResult]:
        """
        Recherche des films par titre.

        Les resultats sont retournes dans l'ordre de TMDB, ce qui compte pour
        la selection du meilleur candidat.

        Args:
            query: Titre du film a rechercher
            year: Annee de sortie (ignoree si 0 ou None)

        Returns:
            Liste de SearchResult (vide si aucun resultat)
        """
        params: dict[str, Any] = {
            "query": query,
            "language": self._language,
            "include_adult": "false",
        }
        if year:
            params["year"] = str(year)

        data = await self._get_json(
            "/search/movie",
            f"tmdb:search:{query}:{year or ''}",
            APICache.SEARCH_TTL,
            params,
        )
        if data is None:
            return []

        results = []
        for item in data.get("results", []):
            release_date = item.get("release_date") or ""
            results.append(
                SearchResult(
                    id=int(item["id"]),
                    title=item.get("title") or item.get("original_title", ""),
                    popularity=float(item.get("popularity") or 0.0),
                    year=int(release_date[:4]) if release_date[:4].isdigit() else None,
                )
            )
        return results

    @provider_errors("tmdb")
    async def get_details(self, tmdb_id: int) -> Optional[FilmDetails]:
        """
        Recupere les details complets d'un film.

        Args:
            tmdb_id: ID TMDB du film

        Returns:
            FilmDetails, ou None si non trouve
        """
        data = await self._get_json(
            f"/movie/{tmdb_id}",
            f"tmdb:movie:{tmdb_id}:{self._language}",
            APICache.DETAILS_TTL,
            {"language": self._language},
        )
        if data is None:
            return None

        return FilmDetails(
            id=int(data["id"]),
            imdb_id=data.get("imdb_id") or None,
            title=data.get("title") or data.get("original_title", ""),
            original_title=data.get("original_title"),
            release_date=data.get("release_date") or "",
            runtime=data.get("runtime"),
            tagline=data.get("tagline") or None,
            overview=data.get("overview") or None,
            poster_path=data.get("poster_path"),
            backdrop_path=data.get("backdrop_path"),
            genres=tuple(genre["name"] for genre in data.get("genres", []) if genre.get("name")),
            production_countries=tuple(
                country["iso_3166_1"]
                for country in data.get("production_countries", [])
                if country.get("iso_3166_1")
            ),
        )

    @provider_errors("tmdb")
    async def get_credits(self, tmdb_id: int) -> Credits:
        """
        Recupere le casting et l'equipe d'un film.

        Args:
            tmdb_id: ID TMDB du film

        Returns:
            Credits (vides si le film est inconnu)
        """
        data = await self._get_json(
            f"/movie/{tmdb_id}/credits",
            f"tmdb:credits:{tmdb_id}",
            APICache.DETAILS_TTL,
        )
        if data is None:
            return Credits()

        return Credits(
            cast=tuple(
                CastMember(id=int(member["id"]), character=member.get("character") or "")
                for member in data.get("cast", [])
            ),
            crew=tuple(
                CrewMember(
                    id=int(member["id"]),
                    job=member.get("job") or "",
                    department=member.get("department") or "",
                )
                for member in data.get("crew", [])
            ),
        )

    @provider_errors("tmdb")
    async def get_release_dates(self, tmdb_id: int) -> list[CountryReleases]:
        """
        Recupere les dates de sortie par pays, dans l'ordre de TMDB.

        Args:
            tmdb_id: ID TMDB du film

        Returns:
            Liste de CountryReleases (vide si le film est inconnu)
        """
        data = await self._get_json(
            f"/movie/{tmdb_id}/release_dates",
            f"tmdb:release_dates:{tmdb_id}",
            APICache.DETAILS_TTL,
        )
        if data is None:
            return []

        return [
            CountryReleases(
                country=record.get("iso_3166_1", ""),
                certifications=tuple(
                    release.get("certification") or ""
                    for release in record.get("release_dates", [])
                ),
            )
            for record in data.get("results", [])
        ]

    @provider_errors("tmdb")
    async def get_person(self, person_id: int) -> Optional[Person]:
        """
        Recupere les details d'une personne.

        Args:
            person_id: ID TMDB de la personne

        Returns:
            Person, ou None si non trouvee
        """
        data = await self._get_json(
            f"/person/{person_id}",
            f"tmdb:person:{person_id}:{self._language}",
            APICache.DETAILS_TTL,
            {"language": self._language},
        )
        if data is None:
            return None

        return Person(
            tmdb_id=int(data["id"]),
            name=data.get("name", ""),
            photo_path=data.get("profile_path"),
            biography=data.get("biography") or None,
            birthday=data.get("birthday"),
            deathday=data.get("deathday"),
            imdb_id=data.get("imdb_id") or None,
        )

    @provider_errors("tmdb")
    async def find_by_imdb_id(self, imdb_id: str) -> Optional[int]:
        """
        Recherche un film via son ID IMDb.

        Utilise l'endpoint TMDB /find/{external_id} avec source=imdb_id.

        Args:
            imdb_id: ID IMDb (format ttXXXXXXX)

        Returns:
            ID TMDB du premier film trouve, None sinon
        """
        data = await self._get_json(
            f"/find/{imdb_id}",
            f"tmdb:find:{imdb_id}",
            APICache.DETAILS_TTL,
            {"external_source": "imdb_id"},
        )
        if data is None:
            return None

        movie_results = data.get("movie_results", [])
        if movie_results:
            return int(movie_results[0]["id"])
        return None

    async def close(self) -> None:
        """
        Ferme le client HTTP.

        Doit etre appele a la fin de l'utilisation pour liberer
        les ressources reseau.
        """
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
