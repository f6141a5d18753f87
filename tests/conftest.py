"""
Fixtures pytest partagees pour les tests CineSync.

Ce module contient les fixtures communes utilisees dans les tests:
- Base SQLite en memoire et stockages SQLModel
- Mocks des ports (sonde technique, fournisseur de metadonnees)
- Settings de test avec chemins temporaires
"""

from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlmodel import Session

from cinesync.config import Settings
from cinesync.core.entities import Volume
from cinesync.core.ports.api_clients import IMetadataProvider, IRatingsProvider
from cinesync.core.ports.parser import IMediaInfoExtractor
from cinesync.infrastructure.persistence.database import create_db_engine, init_db
from cinesync.infrastructure.persistence.repositories import (
    SQLModelCatalogStore,
    SQLModelPersonRepository,
    SQLModelVolumeRepository,
)


@pytest.fixture
def session() -> Iterator[Session]:
    """Session sur une base SQLite en memoire, tables creees."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def catalog_store(session: Session) -> SQLModelCatalogStore:
    return SQLModelCatalogStore(session)


@pytest.fixture
def volume_repository(session: Session) -> SQLModelVolumeRepository:
    return SQLModelVolumeRepository(session)


@pytest.fixture
def person_repository(session: Session) -> SQLModelPersonRepository:
    return SQLModelPersonRepository(session)


@pytest.fixture
def volume_dir(tmp_path: Path) -> Path:
    """Repertoire racine d'un volume de test."""
    root = tmp_path / "films"
    root.mkdir()
    return root


@pytest.fixture
def volume(volume_dir: Path, volume_repository: SQLModelVolumeRepository) -> Volume:
    """Volume enregistre en base, non recursif."""
    return volume_repository.save(Volume(name="Films", path=volume_dir))


@pytest.fixture
def mock_media_info_extractor() -> MagicMock:
    """
    Mock de IMediaInfoExtractor pour les tests.

    Retourne None par defaut (pas de metadonnees techniques).
    """
    mock = MagicMock(spec=IMediaInfoExtractor)
    mock.extract.return_value = None
    return mock


@pytest.fixture
def mock_provider() -> AsyncMock:
    """
    Mock de IMetadataProvider.

    Aucune recherche ne trouve de candidat par defaut.
    """
    mock = AsyncMock(spec=IMetadataProvider)
    mock.search.return_value = []
    mock.get_details.return_value = None
    mock.get_person.return_value = None
    return mock


@pytest.fixture
def mock_ratings() -> AsyncMock:
    """Mock de IRatingsProvider sans note par defaut."""
    mock = AsyncMock(spec=IRatingsProvider)
    mock.get_imdb_rating.return_value = None
    mock.get_letterboxd_rating.return_value = None
    return mock


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings de test avec chemins temporaires."""
    return Settings(
        database_url=f"sqlite:///{tmp_path}/test.db",
        tmdb_api_key=None,
        api_cache_dir=tmp_path / "cache",
        log_file=tmp_path / "test.log",
        watch_poll_interval=0.01,
        scan_workers=4,
    )
