"""
Tests d'integration de la synchronisation et de la surveillance.

Utilise le Container avec les implementations reelles (watchdog, SQLite
en memoire, pipelines de fichiers). Seule la sonde technique est simulee
et TMDB est desactive : les titres restent ceux devines.
"""

import asyncio
from pathlib import Path
from typing import Callable, Iterator
from unittest.mock import MagicMock

import pytest
from dependency_injector import providers
from sqlmodel import Session

from cinesync.config import Settings
from cinesync.container import Container
from cinesync.core.entities import Volume
from tests.fixtures.filesystem import touch


async def _eventually(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Attend qu'une condition devienne vraie (evenements inotify asynchrones)."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition jamais remplie")
        await asyncio.sleep(0.05)


@pytest.fixture
def container(
    test_settings: Settings, session: Session, mock_media_info_extractor: MagicMock
) -> Iterator[Container]:
    container = Container()
    container.config.override(
        providers.Object(test_settings.model_copy(update={"watch_poll_interval": 0.05}))
    )
    container.session.override(providers.Object(session))
    container.media_info_extractor.override(providers.Object(mock_media_info_extractor))
    yield container
    container.api_cache().close()


class TestWatchIntegration:
    """Flow complet : synchronisation au demarrage puis evenements en direct."""

    @pytest.mark.asyncio
    async def test_sync_then_live_changes(self, container: Container, volume_dir: Path) -> None:
        store = container.catalog_store()
        volume = container.volume_repository().save(Volume(name="Films", path=volume_dir))
        existing = touch(volume_dir / "Heat.1995.mkv")
        daemon = container.sync_daemon()

        task = asyncio.create_task(daemon.run(handle_signals=False))
        await _eventually(lambda: volume.id in daemon.reports)
        assert store.get_by_path(existing).title == "Heat"

        created = touch(volume_dir / "Ronin.1998.mkv")
        await _eventually(lambda: store.is_path_present(created))

        renamed = volume_dir / "Ronin (1998).mkv"
        created.rename(renamed)
        await _eventually(lambda: store.is_path_present(renamed))
        assert not store.is_path_present(created)

        existing.unlink()
        await _eventually(lambda: not store.is_path_present(existing))

        daemon.close()
        assert await asyncio.wait_for(task, timeout=5.0) is None
        assert [f.title for f in store.get_all()] == ["Ronin"]
