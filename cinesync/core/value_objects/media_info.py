"""
Objets valeur pour les informations techniques des fichiers.

Objets valeur immutables produits par la sonde technique (mediainfo).
Tous les objets valeur utilisent @dataclass(frozen=True) pour garantir l'immutabilité.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Resolution:
    """
    Résolution vidéo (largeur x hauteur).

    Attributs :
        width : Résolution horizontale en pixels
        height : Résolution verticale en pixels

    Propriétés :
        label : Libellé lisible (8K, 4K, 1440p, 1080p, 720p, 480p)
    """

    width: int
    height: int

    @property
    def label(self) -> str:
        """
        Retourne le libelle de resolution base sur la largeur et hauteur.

        Utilise des seuils tolerants pour les formats cinematographiques
        (hauteur reduite, largeur standard) et les variations mineures
        (ex: 1916 pixels au lieu de 1920). Retourne une chaine vide en
        dessous de la definition standard.
        """
        if self.height >= 4320 or self.width >= 7600:
            return "8K"
        elif self.height >= 2160 or self.width >= 3800:
            return "4K"
        elif self.height >= 1440 or self.width >= 2500:
            return "1440p"
        elif self.height >= 1080 or self.width >= 1900:
            return "1080p"
        elif self.height >= 720 or self.width >= 1260:
            return "720p"
        elif self.height >= 480 or self.width >= 700:
            return "480p"
        return ""

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class VideoTrack:
    """
    Piste vidéo d'un fichier.

    Attributs :
        codec_id : Identifiant du codec (ex: "V_MPEGH/ISO/HEVC")
        profile : Profil du codec (ex: "Main 10")
        resolution : Dimensions de l'image
        frame_rate : Images par seconde
        bit_depth : Profondeur de couleur en bits
    """

    codec_id: Optional[str] = None
    profile: Optional[str] = None
    resolution: Optional[Resolution] = None
    frame_rate: Optional[float] = None
    bit_depth: Optional[int] = None


@dataclass(frozen=True)
class AudioTrack:
    """
    Piste audio d'un fichier.

    Attributs :
        codec_id : Identifiant du codec (ex: "A_AC3")
        channels : Nombre de canaux
        language : Code langue rapporté par mediainfo
        sampling_rate : Fréquence d'échantillonnage en Hz
    """

    codec_id: Optional[str] = None
    channels: Optional[int] = None
    language: Optional[str] = None
    sampling_rate: Optional[int] = None


@dataclass(frozen=True)
class SubtitleTrack:
    """Piste de sous-titres intégrée au conteneur."""

    codec_id: Optional[str] = None
    language: Optional[str] = None
    forced: bool = False


@dataclass(frozen=True)
class MediaInfo:
    """
    Informations techniques complètes d'un fichier vidéo.

    Attributs :
        format : Format du conteneur (ex: "Matroska")
        file_size : Taille du fichier en octets
        duration_seconds : Durée en secondes
        video_tracks : Pistes vidéo
        audio_tracks : Pistes audio
        subtitle_tracks : Pistes de sous-titres intégrées
    """

    format: Optional[str] = None
    file_size: Optional[int] = None
    duration_seconds: Optional[int] = None
    video_tracks: tuple[VideoTrack, ...] = ()
    audio_tracks: tuple[AudioTrack, ...] = ()
    subtitle_tracks: tuple[SubtitleTrack, ...] = ()

    @property
    def resolution(self) -> str:
        """Libellé de résolution de la première piste vidéo (vide si inconnu)."""
        for track in self.video_tracks:
            if track.resolution is not None:
                return track.resolution.label
        return ""
