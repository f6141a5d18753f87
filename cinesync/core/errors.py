"""
Hiérarchie des erreurs du domaine.

Les erreurs sont regroupées par catégorie de traitement :
- NotFoundError : recupere localement (entrée dégradée, titre = nom deviné)
- UnavailableError : réseau, fournisseur ou sonde en échec, non fatal
- ConflictError : doublon signalé à l'appelant, aucune mutation appliquée
- InvariantViolationError : opération incohérente avec l'état stocké
- VolumeScanError : racine (ou sous-répertoire) d'un volume illisible
- InvalidVolumeError : validation de la création d'un volume

Les adaptateurs traduisent leurs exceptions techniques (httpx, sqlalchemy,
OSError) vers ces types : les services ne manipulent jamais les exceptions
des bibliothèques sous-jacentes.
"""

from pathlib import Path
from typing import Optional


class CineSyncError(Exception):
    """Erreur de base de CineSync."""


class NotFoundError(CineSyncError):
    """Une ressource recherchée est absente."""


class ExternalIdNotFoundError(NotFoundError):
    """
    Aucun identifiant TMDB n'a pu être résolu pour un nom deviné.

    Attributs :
        name : Nom deviné depuis le fichier
        year : Année devinée (None si absente)
    """

    def __init__(self, name: str, year: Optional[int] = None) -> None:
        self.name = name
        self.year = year
        hint = f" ({year})" if year else ""
        super().__init__(f"Film introuvable : '{name}'{hint}")


class PathNotFoundError(NotFoundError):
    """
    Aucun enregistrement du catalogue ne correspond au chemin donné.

    Attributs :
        path : Chemin recherché
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Chemin absent du catalogue : {path}")


class UnavailableError(CineSyncError):
    """Un collaborateur externe n'a pas pu répondre."""


class ProviderUnavailableError(UnavailableError):
    """
    Le fournisseur de métadonnées ou une source de notes est indisponible.

    Attributs :
        source : Identifiant de la source ("tmdb", "imdb", "letterboxd")
    """

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        super().__init__(f"{source} indisponible : {reason}")


class ConflictError(CineSyncError):
    """L'élément existe déjà (sous-titre ou fichier de volume en double)."""


class InvariantViolationError(CineSyncError):
    """L'opération demandée contredit l'état du catalogue."""


class VolumeScanError(CineSyncError):
    """
    Le contenu d'un volume n'a pas pu être listé.

    Distincte d'un volume vide : la synchronisation s'interrompt sans
    supprimer d'enregistrements quand cette erreur est levée.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Lecture impossible de {path} : {reason}")


class InvalidVolumeError(CineSyncError):
    """Les paramètres de création d'un volume sont invalides."""
