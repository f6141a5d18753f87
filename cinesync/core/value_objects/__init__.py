"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- Resolution : Resolution video (largeur x hauteur)
- VideoTrack, AudioTrack, SubtitleTrack : Pistes d'un conteneur
- MediaInfo : Composite de toutes les informations techniques media
- ParsedFilename : Informations extraites du parsing d'un nom de fichier
"""

from cinesync.core.value_objects.media_info import (
    AudioTrack,
    MediaInfo,
    Resolution,
    SubtitleTrack,
    VideoTrack,
)
from cinesync.core.value_objects.parsed_info import ParsedFilename

__all__ = [
    "Resolution",
    "VideoTrack",
    "AudioTrack",
    "SubtitleTrack",
    "MediaInfo",
    "ParsedFilename",
]
