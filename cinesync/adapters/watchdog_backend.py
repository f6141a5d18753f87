"""
Backend de surveillance du systeme de fichiers base sur watchdog.

Traduit les evenements watchdog (creation, modification, deplacement,
suppression) en FileEvent et les transmet au sink fourni par le
FileWatcher. Les callbacks s'executent dans le thread de l'observer.
"""

import os
from pathlib import Path
from typing import Optional

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from cinesync.core.ports.watching import EventOp, EventSink, FileEvent, IWatchBackend


def _as_path(raw: str | bytes) -> Path:
    """Convertit un chemin watchdog (str ou bytes) en Path."""
    return Path(os.fsdecode(raw))


class _ForwardingHandler(FileSystemEventHandler):
    """Handler watchdog relayant chaque evenement vers le sink."""

    def __init__(self, sink: EventSink) -> None:
        super().__init__()
        self._sink = sink

    def _forward(
        self,
        op: EventOp,
        event: FileSystemEvent,
        old_path: Optional[Path] = None,
        path: Optional[Path] = None,
    ) -> None:
        self._sink(
            FileEvent(
                op=op,
                path=path if path is not None else _as_path(event.src_path),
                old_path=old_path,
                is_directory=event.is_directory,
            )
        )

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(EventOp.CREATE, event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(EventOp.WRITE, event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._forward(
            EventOp.RENAME,
            event,
            old_path=_as_path(event.src_path),
            path=_as_path(event.dest_path),
        )

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._forward(EventOp.REMOVE, event)


class WatchdogBackend(IWatchBackend):
    """
    Implementation de IWatchBackend avec un Observer watchdog.

    Un seul observer surveille toutes les racines ; chaque racine est
    planifiee (recursive ou non) avec le meme handler.

    Example:
        backend = WatchdogBackend()
        backend.start(sink)
        backend.watch(Path("/media/films"), recursive=True)
        ...
        backend.stop()
    """

    def __init__(self) -> None:
        self._observer: Optional[Observer] = None
        self._handler: Optional[_ForwardingHandler] = None
        self._watches: dict[Path, ObservedWatch] = {}

    def start(self, sink: EventSink) -> None:
        """Demarre l'observer et relaie ses evenements vers sink."""
        if self._observer is not None:
            return
        self._handler = _ForwardingHandler(sink)
        self._observer = Observer()
        self._observer.daemon = True
        self._observer.start()
        logger.debug("Observer watchdog demarre")

    def stop(self) -> None:
        """Arrete l'observer et attend la fin de son thread."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        self._handler = None
        self._watches.clear()
        logger.debug("Observer watchdog arrete")

    def watch(self, path: Path, recursive: bool) -> None:
        """
        Ajoute une racine surveillee.

        Raises:
            RuntimeError: Si le backend n'est pas demarre
            OSError: Si la racine ne peut pas etre surveillee
        """
        if self._observer is None or self._handler is None:
            raise RuntimeError("Backend de surveillance non demarre")
        if path in self._watches:
            return
        self._watches[path] = self._observer.schedule(
            self._handler, str(path), recursive=recursive
        )
        logger.debug(f"Surveillance de {path} (recursive={recursive})")

    def unwatch(self, path: Path) -> None:
        """Retire une racine surveillee (sans effet si absente)."""
        watch = self._watches.pop(path, None)
        if watch is not None and self._observer is not None:
            self._observer.unschedule(watch)
            logger.debug(f"Fin de surveillance de {path}")

    def is_alive(self) -> bool:
        """Verifie si le thread de l'observer tourne."""
        return self._observer is not None and self._observer.is_alive()
