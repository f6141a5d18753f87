"""
Container d'injection de dependances via dependency-injector.

Cable la configuration, la base de donnees, les adapters et les services.
Les services a etat (watcher, film manager, filtres) sont des singletons.
"""

from typing import Optional

from dependency_injector import containers, providers

from cinesync.adapters.api.cache import APICache
from cinesync.adapters.api.ratings_scraper import RatingsScraper
from cinesync.adapters.api.tmdb_client import TMDBClient
from cinesync.adapters.parsing.mediainfo_extractor import MediaInfoExtractor
from cinesync.adapters.watchdog_backend import WatchdogBackend
from cinesync.config import Settings
from cinesync.infrastructure.persistence.database import get_session, init_db
from cinesync.infrastructure.persistence.repositories import (
    SQLModelCatalogStore,
    SQLModelPersonRepository,
    SQLModelVolumeRepository,
)
from cinesync.services.daemon import SyncDaemon
from cinesync.services.enricher import MetadataEnricher
from cinesync.services.file_handler import FileHandler
from cinesync.services.film_manager import FilmManager
from cinesync.services.filters import CatalogFilters
from cinesync.services.scanner import VolumeScanner
from cinesync.services.synchronizer import VolumeSynchronizer
from cinesync.services.volume_manager import VolumeManager
from cinesync.services.watcher import FileWatcher


def _tmdb_client(settings: Settings, cache: APICache) -> Optional[TMDBClient]:
    """Client TMDB, ou None si aucune cle n'est configuree."""
    if not settings.tmdb_enabled:
        return None
    return TMDBClient(
        api_key=settings.tmdb_api_key,
        cache=cache,
        language=settings.tmdb_language,
        timeout=settings.http_timeout,
    )


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Initialise la DB une fois
        daemon = container.sync_daemon()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - Resource pour initialisation unique
    database = providers.Resource(init_db)

    # Session partagee par les repositories d'un meme processus
    session = providers.Singleton(lambda: next(get_session()))

    # Repositories
    catalog_store = providers.Singleton(SQLModelCatalogStore, session=session)
    volume_repository = providers.Singleton(SQLModelVolumeRepository, session=session)
    person_repository = providers.Singleton(SQLModelPersonRepository, session=session)

    # Adapters
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.api_cache_dir,
    )
    tmdb_client = providers.Singleton(_tmdb_client, settings=config, cache=api_cache)
    ratings_scraper = providers.Singleton(
        RatingsScraper,
        timeout=config.provided.http_timeout,
    )
    media_info_extractor = providers.Singleton(MediaInfoExtractor)
    watch_backend = providers.Singleton(WatchdogBackend)

    # Services
    scanner = providers.Singleton(VolumeScanner)
    enricher = providers.Singleton(
        MetadataEnricher,
        media_info_extractor=media_info_extractor,
        metadata_provider=tmdb_client,
        ratings_provider=ratings_scraper,
    )
    catalog_filters = providers.Singleton(
        lambda store: CatalogFilters.from_films(store.get_all()),
        store=catalog_store,
    )
    film_manager = providers.Singleton(
        FilmManager,
        catalog_store=catalog_store,
        person_repository=person_repository,
        enricher=enricher,
        filters=catalog_filters,
        metadata_provider=tmdb_client,
        ratings_provider=ratings_scraper,
    )
    file_handler = providers.Singleton(
        FileHandler,
        catalog_store=catalog_store,
        enricher=enricher,
        film_manager=film_manager,
    )
    watcher = providers.Singleton(
        FileWatcher,
        backend=watch_backend,
        file_handler=file_handler,
        poll_interval=config.provided.watch_poll_interval,
    )
    synchronizer = providers.Singleton(
        VolumeSynchronizer,
        scanner=scanner,
        catalog_store=catalog_store,
        file_handler=file_handler,
    )
    volume_manager = providers.Singleton(
        VolumeManager,
        volume_repository=volume_repository,
        catalog_store=catalog_store,
        scanner=scanner,
        enricher=enricher,
        film_manager=film_manager,
        watcher=watcher,
        scan_workers=config.provided.scan_workers,
    )
    sync_daemon = providers.Singleton(
        SyncDaemon,
        volume_manager=volume_manager,
        synchronizer=synchronizer,
        watcher=watcher,
    )
