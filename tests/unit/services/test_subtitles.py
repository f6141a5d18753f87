"""
Tests unitaires pour la correlation video / sous-titres.
"""

from pathlib import Path

from cinesync.core.entities import Subtitle
from cinesync.services.subtitles import (
    related_media_for,
    related_subtitle_files,
    subtitles_for,
)
from tests.fixtures.filesystem import touch


class TestSubtitlesFor:
    """Tests pour la selection des sous-titres d'une video."""

    def test_language_between_stem_and_extension(self, tmp_path: Path) -> None:
        media = tmp_path / "Phone.Booth.2002.mkv"
        subtitle = tmp_path / "Phone.Booth.2002.en.srt"

        assert subtitles_for(media, [subtitle]) == [Subtitle(path=subtitle, language="en")]

    def test_no_language(self, tmp_path: Path) -> None:
        media = tmp_path / "Phone.Booth.2002.mkv"
        subtitle = tmp_path / "Phone.Booth.2002.srt"

        assert subtitles_for(media, [subtitle])[0].language == ""

    def test_separator_is_stripped_once(self, tmp_path: Path) -> None:
        media = tmp_path / "Film.mkv"

        result = subtitles_for(
            media, [tmp_path / "Film-fr.srt", tmp_path / "Film_de.ass", tmp_path / "Film.forced.en.srt"]
        )

        assert [s.language for s in result] == ["fr", "de", "forced.en"]

    def test_other_directory_is_ignored(self, tmp_path: Path) -> None:
        media = tmp_path / "Film.mkv"

        assert subtitles_for(media, [tmp_path / "sub" / "Film.en.srt"]) == []

    def test_other_name_is_ignored(self, tmp_path: Path) -> None:
        media = tmp_path / "Film.mkv"

        assert subtitles_for(media, [tmp_path / "Autre.en.srt"]) == []


class TestRelatedFiles:
    """Tests pour la recherche sur disque."""

    def test_related_subtitle_files(self, tmp_path: Path) -> None:
        media = touch(tmp_path / "Film.2002.mkv")
        english = touch(tmp_path / "Film.2002.en.srt")
        touch(tmp_path / "Film.2002.nfo")
        touch(tmp_path / "Autre.en.srt")

        assert related_subtitle_files(media) == [english]

    def test_related_subtitle_files_unreadable_directory(self, tmp_path: Path) -> None:
        assert related_subtitle_files(tmp_path / "absent" / "Film.mkv") == []

    def test_related_media_for_several_videos(self, tmp_path: Path) -> None:
        """Un sous-titre peut se rattacher a plusieurs videos de meme nom."""
        avi = touch(tmp_path / "Film.avi")
        mkv = touch(tmp_path / "Film.mkv")
        subtitle = touch(tmp_path / "Film.en.srt")
        touch(tmp_path / "Filmographie.txt")

        related = related_media_for(subtitle)

        assert related == [
            (avi, Subtitle(path=subtitle, language="en")),
            (mkv, Subtitle(path=subtitle, language="en")),
        ]

    def test_related_media_for_requires_full_stem(self, tmp_path: Path) -> None:
        """Le nom du sous-titre doit commencer par le nom complet de la video."""
        touch(tmp_path / "Film.1080p.mkv")
        touch(tmp_path / "Film.720p.mkv")
        subtitle = touch(tmp_path / "Film.1080p.fr.srt")

        related = related_media_for(subtitle)

        assert [media.name for media, _ in related] == ["Film.1080p.mkv"]
        assert related[0][1].language == "fr"

    def test_related_media_for_without_video(self, tmp_path: Path) -> None:
        subtitle = touch(tmp_path / "Orphelin.srt")

        assert related_media_for(subtitle) == []
