"""
Interface port pour la sonde technique des fichiers.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from cinesync.core.value_objects import MediaInfo


class IMediaInfoExtractor(ABC):
    """
    Interface d'extraction des informations techniques.

    L'échec est non fatal : la résolution se rabat sur celle devinée
    depuis le nom de fichier.
    """

    @abstractmethod
    def extract(self, file_path: Path) -> Optional[MediaInfo]:
        """
        Extrait les informations techniques d'un fichier vidéo.

        Args :
            file_path : Chemin du fichier

        Retourne :
            MediaInfo, ou None si l'extraction échoue
        """
        ...
