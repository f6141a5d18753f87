"""
Orchestration du demarrage de la surveillance.

Demarre la boucle du watcher, lui confie tous les volumes enregistres,
synchronise chaque volume l'un apres l'autre puis surveille jusqu'a
l'arret (SIGINT/SIGTERM ou close()).
"""

import asyncio
import signal
from typing import Optional

from loguru import logger

from cinesync.core.errors import VolumeScanError
from cinesync.core.ports.watching import WatchError
from cinesync.services.synchronizer import SyncReport, VolumeSynchronizer
from cinesync.services.volume_manager import VolumeManager
from cinesync.services.watcher import FileWatcher

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SyncDaemon:
    """Service de synchronisation au demarrage puis de surveillance continue."""

    def __init__(
        self,
        volume_manager: VolumeManager,
        synchronizer: VolumeSynchronizer,
        watcher: FileWatcher,
    ) -> None:
        self._volume_manager = volume_manager
        self._synchronizer = synchronizer
        self._watcher = watcher
        self.reports: dict[str, SyncReport] = {}

    def close(self) -> None:
        """Demande l'arret de la surveillance."""
        self._watcher.close()

    async def run(self, handle_signals: bool = True) -> Optional[WatchError]:
        """
        Synchronise les volumes puis surveille jusqu'a l'arret.

        Args:
            handle_signals: Arreter proprement sur SIGINT/SIGTERM

        Returns:
            Le WatchError ayant interrompu la surveillance, None si arret demande
        """
        self._watcher.start()
        watch_task = asyncio.create_task(self._watcher.run())
        if handle_signals:
            self._install_signal_handlers()

        try:
            volumes = self._volume_manager.list_volumes()
            for volume in volumes:
                self._watcher.add_volume(volume)

            for volume in volumes:
                if watch_task.done():
                    break
                try:
                    self.reports[volume.id] = await self._synchronizer.sync(volume)
                except VolumeScanError as e:
                    logger.error(f"Synchronisation du volume {volume.name} impossible: {e}")

            logger.info(f"{len(volumes)} volume(s) synchronise(s), surveillance en cours")
            return await watch_task
        finally:
            if handle_signals:
                self._remove_signal_handlers()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in _STOP_SIGNALS:
            try:
                loop.add_signal_handler(sig, self.close)
            except NotImplementedError:
                logger.debug(f"Signal {sig.name} non gere sur cette plateforme")

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in _STOP_SIGNALS:
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                pass
