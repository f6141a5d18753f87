"""
Implementation de la sonde technique avec pymediainfo.

Ce module fournit MediaInfoExtractor qui implemente IMediaInfoExtractor
pour extraire format, taille, duree et pistes des fichiers video.
"""

from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pymediainfo import MediaInfo as PyMediaInfo

from cinesync.core.ports.parser import IMediaInfoExtractor
from cinesync.core.value_objects.media_info import (
    AudioTrack,
    MediaInfo,
    Resolution,
    SubtitleTrack,
    VideoTrack,
)


def _to_int(value: Any) -> Optional[int]:
    """Convertit une valeur mediainfo en entier ("5.1" ou "8 / 8" tolere)."""
    if value is None:
        return None
    try:
        return int(float(str(value).split("/")[0].strip()))
    except ValueError:
        return None


def _to_float(value: Any) -> Optional[float]:
    """Convertit une valeur mediainfo en flottant."""
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class MediaInfoExtractor(IMediaInfoExtractor):
    """
    Sonde technique utilisant pymediainfo.

    Extrait le conteneur, la taille, la duree et le detail des pistes
    video, audio et sous-titres. Tout echec retourne None.
    """

    def extract(self, file_path: Path) -> Optional[MediaInfo]:
        """
        Extrait les informations techniques d'un fichier video.

        Args:
            file_path: Chemin complet vers le fichier video

        Returns:
            MediaInfo avec les informations extraites, ou None si
            l'extraction echoue (fichier absent, corrompu, bibliotheque absente)
        """
        if not file_path.exists():
            return None

        try:
            media_info = PyMediaInfo.parse(str(file_path), full=True)
        except Exception as e:
            logger.warning(f"Echec mediainfo pour {file_path}: {e}")
            return None

        general_tracks = [t for t in media_info.tracks if t.track_type == "General"]
        video_tracks = [t for t in media_info.tracks if t.track_type == "Video"]
        audio_tracks = [t for t in media_info.tracks if t.track_type == "Audio"]
        text_tracks = [t for t in media_info.tracks if t.track_type == "Text"]

        general = general_tracks[0] if general_tracks else None

        return MediaInfo(
            format=general.format if general else None,
            file_size=_to_int(general.file_size) if general else None,
            duration_seconds=self._extract_duration(general),
            video_tracks=tuple(self._video_track(t) for t in video_tracks),
            audio_tracks=tuple(self._audio_track(t) for t in audio_tracks),
            subtitle_tracks=tuple(self._subtitle_track(t) for t in text_tracks),
        )

    def _video_track(self, track: Any) -> VideoTrack:
        """Convertit une piste video pymediainfo."""
        width = _to_int(track.width)
        height = _to_int(track.height)
        resolution = (
            Resolution(width=width, height=height)
            if width is not None and height is not None
            else None
        )
        return VideoTrack(
            codec_id=track.codec_id or track.format,
            profile=track.format_profile,
            resolution=resolution,
            frame_rate=_to_float(track.frame_rate),
            bit_depth=_to_int(track.bit_depth),
        )

    def _audio_track(self, track: Any) -> AudioTrack:
        """Convertit une piste audio pymediainfo."""
        return AudioTrack(
            codec_id=track.codec_id or track.format,
            channels=_to_int(track.channel_s),
            language=track.language,
            sampling_rate=_to_int(track.sampling_rate),
        )

    def _subtitle_track(self, track: Any) -> SubtitleTrack:
        """Convertit une piste de sous-titres pymediainfo."""
        return SubtitleTrack(
            codec_id=track.codec_id or track.format,
            language=track.language,
            forced=str(track.forced or "").lower() == "yes",
        )

    def _extract_duration(self, general: Any) -> Optional[int]:
        """
        Extrait la duree en SECONDES depuis la piste generale.

        pymediainfo retourne la duree en millisecondes.
        """
        if general is None or general.duration is None:
            return None
        duration_ms = _to_float(general.duration)
        return int(duration_ms / 1000) if duration_ms is not None else None
