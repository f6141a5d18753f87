"""
Clients API externes pour l'enrichissement des metadonnees.

Ce module fournit les adaptateurs pour communiquer avec les sources externes:
- TMDB: The Movie Database (recherche, details, credits, personnes)
- IMDb et Letterboxd: notes publiques recuperees par scraping HTML

Infrastructure partagee:
- APICache: Cache persistant avec TTL differencies (recherche 24h, details 7j)
- RateLimitError: Exception pour les erreurs 429
- with_retry: Decorateur avec backoff exponentiel pour gerer le rate limiting
"""

from cinesync.adapters.api.cache import APICache
from cinesync.adapters.api.retry import RateLimitError, request_with_retry, with_retry

__all__ = [
    "APICache",
    "RateLimitError",
    "with_retry",
    "request_with_retry",
]
