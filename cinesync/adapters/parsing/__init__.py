"""
Adaptateurs d'analyse des fichiers video.

- MediaInfoExtractor : informations techniques via pymediainfo
"""

from cinesync.adapters.parsing.mediainfo_extractor import MediaInfoExtractor

__all__ = ["MediaInfoExtractor"]
