"""
Interface port pour la surveillance du système de fichiers.

Le backend livre des FileEvent par chemin, et un WatchError terminal
quand le sous-système de surveillance échoue. Les évènements sont
transmis au sink depuis le thread du backend : le sink doit être
thread-safe.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union


class EventOp(Enum):
    """Nature d'un évènement du système de fichiers."""

    CREATE = "create"
    WRITE = "write"
    RENAME = "rename"
    REMOVE = "remove"


@dataclass(frozen=True)
class FileEvent:
    """
    Évènement brut du système de fichiers.

    Attributs :
        op : Nature de l'évènement
        path : Chemin concerné (nouveau chemin pour un renommage)
        old_path : Ancien chemin (renommage uniquement)
        is_directory : Le chemin désigne un répertoire
    """

    op: EventOp
    path: Path
    old_path: Optional[Path] = None
    is_directory: bool = False


@dataclass(frozen=True)
class WatchError:
    """Signal terminal : le sous-système de surveillance a échoué."""

    message: str


WatchSignal = Union[FileEvent, WatchError]
EventSink = Callable[[WatchSignal], None]


class IWatchBackend(ABC):
    """Interface du sous-système de surveillance des fichiers."""

    @abstractmethod
    def start(self, sink: EventSink) -> None:
        """Démarre la surveillance et transmet les évènements au sink."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """Arrête la surveillance (idempotent)."""
        ...

    @abstractmethod
    def watch(self, path: Path, recursive: bool) -> None:
        """Ajoute une racine surveillée."""
        ...

    @abstractmethod
    def unwatch(self, path: Path) -> None:
        """Retire une racine surveillée."""
        ...

    @abstractmethod
    def is_alive(self) -> bool:
        """Vérifie si la surveillance est active."""
        ...
