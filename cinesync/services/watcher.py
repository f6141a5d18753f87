"""
Surveillance en direct des volumes.

Le FileWatcher est un acteur asyncio : une seule boite de reception reçoit
les evenements du backend (thread-safe), le tick de scrutation periodique
et les commandes d'ajout/retrait de volumes. L'etat (volumes surveilles,
ecritures en cours) n'est modifie que par la boucle de l'acteur.

Une creation ou une ecriture n'est traitee qu'une fois le fichier stable :
deux scrutations consecutives doivent voir la meme date de modification.
Les renommages et suppressions sont traites immediatement. Les traitements
sont executes un par un, dans l'ordre, par une tache dediee pour ne pas
bloquer la cadence de scrutation.
"""

import asyncio
import contextlib
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from loguru import logger

from cinesync.core.entities import Volume
from cinesync.core.errors import CineSyncError
from cinesync.core.ports.watching import (
    EventOp,
    FileEvent,
    IWatchBackend,
    WatchError,
    WatchSignal,
)
from cinesync.services.file_handler import FileHandler
from cinesync.utils.constants import is_media_file

DEFAULT_POLL_INTERVAL = 5.0


@dataclass(frozen=True)
class Unseen:
    """Chemin sans ecriture en cours."""


@dataclass(frozen=True)
class PendingWrite:
    """
    Ecriture en cours sur un chemin.

    Attributs:
        last_mtime: Date de modification vue a la derniere scrutation
            (None tant qu'aucune scrutation n'a eu lieu)
    """

    last_mtime: Optional[float] = None


WriteState = Union[Unseen, PendingWrite]


@dataclass(frozen=True)
class _Tick:
    pass


@dataclass(frozen=True)
class _AddVolume:
    volume: Volume


@dataclass(frozen=True)
class _RemoveVolume:
    volume_id: str


@dataclass(frozen=True)
class _Close:
    pass


_Message = Union[FileEvent, WatchError, _Tick, _AddVolume, _RemoveVolume, _Close]
_Job = Callable[[], Awaitable[None]]


class FileWatcher:
    """
    Acteur de surveillance des volumes.

    Usage:
        watcher.start()
        task = asyncio.create_task(watcher.run())
        watcher.add_volume(volume)
        ...
        watcher.close()
        await task
    """

    def __init__(
        self,
        backend: IWatchBackend,
        file_handler: FileHandler,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """
        Initialise le watcher.

        Args:
            backend: Sous-systeme de surveillance des fichiers
            file_handler: Pipelines de creation, renommage et suppression
            poll_interval: Intervalle de scrutation des ecritures (secondes)
        """
        self._backend = backend
        self._handler = file_handler
        self._poll_interval = poll_interval
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._inbox: Optional[asyncio.Queue[_Message]] = None
        self._jobs: Optional[asyncio.Queue[Optional[_Job]]] = None
        self._dispatcher: Optional[asyncio.Task] = None
        self._volumes: dict[Path, Volume] = {}
        self._pending: dict[Path, PendingWrite] = {}
        self._closed = False

    @property
    def volumes(self) -> list[Volume]:
        """Volumes actuellement surveilles."""
        return list(self._volumes.values())

    @property
    def is_running(self) -> bool:
        """Verifie si la boucle accepte encore des messages."""
        return self._inbox is not None and not self._closed

    def state_of(self, path: Path) -> WriteState:
        """Etat de scrutation d'un chemin."""
        return self._pending.get(path, Unseen())

    def start(self) -> None:
        """
        Prepare la boite de reception et demarre le backend.

        Doit etre appele depuis la boucle asyncio qui executera run().
        """
        if self._inbox is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._inbox = asyncio.Queue()
        self._jobs = asyncio.Queue()
        self._backend.start(self.submit)
        logger.debug("Surveillance demarree")

    def submit(self, signal: WatchSignal) -> None:
        """Transmet un signal du backend a la boucle (appelable depuis tout thread)."""
        if self._closed or self._loop is None or self._inbox is None:
            return
        self._loop.call_soon_threadsafe(self._inbox.put_nowait, signal)

    def add_volume(self, volume: Volume) -> None:
        """Demande la surveillance d'un volume."""
        self._post(_AddVolume(volume))

    def remove_volume(self, volume_id: str) -> None:
        """Demande l'arret de la surveillance d'un volume."""
        self._post(_RemoveVolume(volume_id))

    def close(self) -> None:
        """Demande l'arret de la boucle ; le traitement en cours se termine."""
        if self._inbox is not None and not self._closed:
            self._inbox.put_nowait(_Close())

    def _post(self, message: _Message) -> None:
        if self._inbox is None:
            raise RuntimeError("Watcher non demarre")
        self._inbox.put_nowait(message)

    async def run(self) -> Optional[WatchError]:
        """
        Boucle de l'acteur, jusqu'a close() ou une erreur du backend.

        Returns:
            Le WatchError ayant interrompu la boucle, None si fermee normalement
        """
        self.start()
        assert self._inbox is not None

        ticker = asyncio.create_task(self._tick())
        self._dispatcher = asyncio.create_task(self._dispatch_jobs())
        error: Optional[WatchError] = None

        try:
            while True:
                message = await self._inbox.get()

                if isinstance(message, _Close):
                    logger.info("Surveillance arretee")
                    break
                if isinstance(message, WatchError):
                    error = message
                    break

                if isinstance(message, _Tick):
                    if not self._backend.is_alive():
                        error = WatchError("le sous-systeme de surveillance s'est arrete")
                        break
                    self._check_dispatcher()
                    self._poll_pending()
                elif isinstance(message, FileEvent):
                    self._handle_event(message)
                elif isinstance(message, _AddVolume):
                    self._watch(message.volume)
                elif isinstance(message, _RemoveVolume):
                    self._unwatch(message.volume_id)
        finally:
            self._closed = True
            self._backend.stop()
            ticker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ticker
            await self._stop_dispatcher()

        if error is not None:
            logger.error(f"Surveillance interrompue: {error.message}")
        return error

    async def _tick(self) -> None:
        assert self._inbox is not None
        while True:
            await asyncio.sleep(self._poll_interval)
            self._inbox.put_nowait(_Tick())

    def _watch(self, volume: Volume) -> None:
        if volume.path in self._volumes:
            logger.debug(f"Volume deja surveille: {volume.path}")
            return
        try:
            self._backend.watch(volume.path, volume.is_recursive)
        except OSError as e:
            logger.error(f"Surveillance impossible du volume {volume.name}: {e}")
            return
        self._volumes[volume.path] = volume
        logger.info(f"Volume surveille: {volume.name} ({volume.path})")

    def _unwatch(self, volume_id: str) -> None:
        volume = next((v for v in self._volumes.values() if v.id == volume_id), None)
        if volume is None:
            logger.debug(f"Volume {volume_id} non surveille")
            return

        self._backend.unwatch(volume.path)
        del self._volumes[volume.path]
        for path in [p for p in self._pending if volume.contains(p)]:
            del self._pending[path]
        logger.info(f"Volume retire de la surveillance: {volume.name}")

    def _owner(self, path: Path) -> Optional[Volume]:
        """Volume le plus specifique contenant le chemin."""
        owners = [v for v in self._volumes.values() if v.contains(path)]
        return max(owners, key=lambda v: len(v.path.parts), default=None)

    def _handle_event(self, event: FileEvent) -> None:
        if event.is_directory:
            return
        logger.debug(f"Evenement {event.op.value}: {event.path}")

        if event.op in (EventOp.CREATE, EventOp.WRITE):
            self._register_write(event.path)
        elif event.op == EventOp.RENAME and event.old_path is not None:
            self._pending.pop(event.old_path, None)
            self._dispatch_rename(event.old_path, event.path)
        elif event.op == EventOp.REMOVE:
            self._pending.pop(event.path, None)
            if is_media_file(event.path):
                self._enqueue(partial(self._handler.handle_remove, event.path))

    def _register_write(self, path: Path) -> None:
        if not is_media_file(path) or path in self._pending:
            return
        if self._owner(path) is None:
            logger.debug(f"Hors des volumes surveilles: {path}")
            return
        self._pending[path] = PendingWrite()

    def _dispatch_rename(self, old_path: Path, new_path: Path) -> None:
        if not (is_media_file(old_path) or is_media_file(new_path)):
            return
        volume = self._owner(new_path)
        if volume is None:
            self._enqueue(partial(self._handler.handle_remove, old_path))
            return
        self._enqueue(partial(self._handler.handle_rename, old_path, new_path, volume))

    def _poll_pending(self) -> None:
        """Traite les ecritures dont la date de modification n'a pas change."""
        for path, state in list(self._pending.items()):
            try:
                mtime = path.stat().st_mtime
            except OSError:
                logger.debug(f"Disparu avant stabilisation: {path}")
                del self._pending[path]
                continue

            if state.last_mtime is None or mtime != state.last_mtime:
                self._pending[path] = PendingWrite(mtime)
                continue

            del self._pending[path]
            logger.debug(f"Fichier stable: {path}")
            self._enqueue(partial(self._handler.handle_create, path, self._owner(path)))

    def _enqueue(self, job: _Job) -> None:
        assert self._jobs is not None
        self._jobs.put_nowait(job)

    async def _dispatch_jobs(self) -> None:
        assert self._jobs is not None
        while True:
            job = await self._jobs.get()
            if job is None:
                return
            try:
                await job()
            except CineSyncError as e:
                logger.error(f"Traitement en echec: {e}")
            except Exception as e:
                logger.exception(f"Erreur inattendue pendant un traitement: {e}")

    def _check_dispatcher(self) -> None:
        """Propage l'exception qui aurait arrete la tache de traitement."""
        if self._dispatcher is not None and self._dispatcher.done():
            self._dispatcher.result()

    async def _stop_dispatcher(self) -> None:
        """Abandonne les traitements en attente et laisse finir le traitement en cours."""
        if self._jobs is None or self._dispatcher is None:
            return

        dropped = 0
        while not self._jobs.empty():
            self._jobs.get_nowait()
            dropped += 1
        if dropped:
            logger.warning(f"{dropped} traitement(s) abandonne(s) a l'arret")

        if not self._dispatcher.done():
            self._jobs.put_nowait(None)
        await self._dispatcher
