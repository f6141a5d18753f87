"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Ports repository : Contrats de persistance
- ICatalogStore : Entrées du catalogue (films et copies)
- IVolumeRepository : Volumes
- IPersonRepository : Personnes

Ports sources externes :
- IMetadataProvider : Fournisseur de métadonnées (TMDB)
- IRatingsProvider : Notes publiques (IMDb, Letterboxd)
- IMediaInfoExtractor : Sonde technique

Port surveillance :
- IWatchBackend : Évènements du système de fichiers
"""

from cinesync.core.ports.api_clients import (
    CastMember,
    CountryReleases,
    Credits,
    CrewMember,
    FilmDetails,
    IMetadataProvider,
    IRatingsProvider,
    SearchResult,
)
from cinesync.core.ports.parser import IMediaInfoExtractor
from cinesync.core.ports.repositories import (
    ICatalogStore,
    IPersonRepository,
    IVolumeRepository,
)
from cinesync.core.ports.watching import (
    EventOp,
    EventSink,
    FileEvent,
    IWatchBackend,
    WatchError,
    WatchSignal,
)

__all__ = [
    # Repositories
    "ICatalogStore",
    "IVolumeRepository",
    "IPersonRepository",
    # Sources externes
    "IMetadataProvider",
    "IRatingsProvider",
    "IMediaInfoExtractor",
    "SearchResult",
    "FilmDetails",
    "Credits",
    "CastMember",
    "CrewMember",
    "CountryReleases",
    # Surveillance
    "IWatchBackend",
    "EventOp",
    "EventSink",
    "FileEvent",
    "WatchError",
    "WatchSignal",
]
