"""
Tests pour SQLModelCatalogStore.

Utilise une base SQLite en memoire et verifie:
- L'indexation des chemins video et sous-titres
- La fusion des copies d'une meme oeuvre
- Le remplacement et la suppression des copies
- La suppression de l'entree avec sa derniere copie
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from cinesync.core.entities import Character, Film, Subtitle, Volume, VolumeFile
from cinesync.core.errors import (
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    PathNotFoundError,
)
from cinesync.core.value_objects import AudioTrack, MediaInfo, Resolution, VideoTrack
from cinesync.infrastructure.persistence.repositories import (
    SQLModelCatalogStore,
    SQLModelVolumeRepository,
)


def _film(path: Path, volume: Volume, tmdb_id: int | None = 1817, **fields) -> Film:
    return Film(
        tmdb_id=tmdb_id,
        guessed_name="Phone Booth",
        guessed_year=2002,
        volume_files=[VolumeFile(path=path, volume_id=volume.id)],
        **fields,
    )


@pytest.fixture
def video(volume: Volume) -> Path:
    return volume.path / "Phone.Booth.2002.mkv"


class TestAdd:
    """Tests pour add et la lecture."""

    def test_add_assigns_id_and_indexes_path(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        stored = catalog_store.add(_film(video, volume, title="Phone Booth"))

        assert stored.id is not None
        assert catalog_store.is_path_present(video)
        assert catalog_store.is_present(1817)
        assert catalog_store.get_by_path(video).title == "Phone Booth"
        assert catalog_store.get_by_id(stored.id).volume_files[0].volume_id == volume.id

    def test_lists_and_cast_survive_storage(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        stored = catalog_store.add(
            _film(
                video,
                volume,
                genres=["Thriller", "Crime"],
                countries=["US"],
                directors=[5575],
                writers=[6586],
                cast=[Character(name="Stu Shepard", person_tmdb_id=72466)],
            )
        )

        film = catalog_store.get_by_id(stored.id)

        assert film.genres == ["Thriller", "Crime"]
        assert film.countries == ["US"]
        assert film.directors == [5575]
        assert film.writers == [6586]
        assert film.cast == [Character(name="Stu Shepard", person_tmdb_id=72466)]

    def test_media_info_survives_storage(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        media_info = MediaInfo(
            format="Matroska",
            duration_seconds=4860,
            video_tracks=(VideoTrack(codec_id="V_MPEGH/ISO/HEVC", resolution=Resolution(1920, 800)),),
            audio_tracks=(AudioTrack(codec_id="A_AC3", channels=6, language="en"),),
        )
        film = _film(video, volume)
        film.volume_files[0].media_info = media_info

        stored = catalog_store.add(film)

        assert stored.volume_files[0].media_info == media_info

    def test_add_with_existing_id_replaces_entry(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        stored = catalog_store.add(_film(video, volume, tmdb_id=None))
        stored.tmdb_id = 1817
        stored.title = "Phone Booth"

        catalog_store.add(stored)

        films = catalog_store.get_all()
        assert len(films) == 1
        assert films[0].tmdb_id == 1817
        assert [vf.path for vf in films[0].volume_files] == [video]

    def test_add_path_owned_by_other_entry_conflicts(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        catalog_store.add(_film(video, volume))

        with pytest.raises(ConflictError):
            catalog_store.add(_film(video, volume, tmdb_id=603))

    def test_get_by_path_unknown(self, catalog_store: SQLModelCatalogStore) -> None:
        with pytest.raises(PathNotFoundError):
            catalog_store.get_by_path(Path("/nowhere.mkv"))

    def test_get_by_volume(
        self,
        catalog_store: SQLModelCatalogStore,
        volume_repository: SQLModelVolumeRepository,
        volume: Volume,
        video: Path,
        tmp_path: Path,
    ) -> None:
        other = volume_repository.save(Volume(name="Autres", path=tmp_path / "autres"))
        catalog_store.add(_film(video, volume))
        catalog_store.add(_film(other.path / "Heat.1995.mkv", other, tmdb_id=949))

        films = catalog_store.get_by_volume(volume.id)

        assert [f.tmdb_id for f in films] == [1817]


class TestVolumeFiles:
    """Tests pour la gestion des copies."""

    def test_add_volume_file_to_existing_appends(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        catalog_store.add(_film(video, volume))
        copy = volume.path / "Phone.Booth.2002.2160p.mkv"

        merged = catalog_store.add_volume_file_to_existing(_film(copy, volume))

        assert [vf.path for vf in merged.volume_files] == [video, copy]
        assert len(catalog_store.get_all()) == 1

    def test_add_volume_file_to_existing_without_entry(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        with pytest.raises(NotFoundError):
            catalog_store.add_volume_file_to_existing(_film(video, volume))

    def test_add_volume_file_to_existing_duplicate_path(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        catalog_store.add(_film(video, volume))

        with pytest.raises(ConflictError):
            catalog_store.add_volume_file_to_existing(_film(video, volume))

    def test_replace_volume_file_keeps_position(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        second = volume.path / "copy.mkv"
        catalog_store.add(_film(video, volume))
        film = catalog_store.add_volume_file_to_existing(_film(second, volume))
        renamed = volume.path / "Phone Booth (2002).mkv"

        updated = catalog_store.replace_volume_file(
            film, video, VolumeFile(path=renamed, volume_id=volume.id)
        )

        assert [vf.path for vf in updated.volume_files] == [renamed, second]
        assert not catalog_store.is_path_present(video)

    def test_replace_volume_file_of_other_entry(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        catalog_store.add(_film(video, volume))
        other = catalog_store.add(_film(volume.path / "Heat.mkv", volume, tmdb_id=949))

        with pytest.raises(InvariantViolationError):
            catalog_store.replace_volume_file(
                other, video, VolumeFile(path=volume.path / "x.mkv")
            )

    def test_delete_last_volume_file_deletes_entry(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        catalog_store.add(_film(video, volume))

        catalog_store.delete_volume_file(video)

        assert catalog_store.get_all() == []
        assert not catalog_store.is_present(1817)

    def test_delete_one_of_two_copies_keeps_entry(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        copy = volume.path / "copy.mkv"
        catalog_store.add(_film(video, volume))
        catalog_store.add_volume_file_to_existing(_film(copy, volume))

        catalog_store.delete_volume_file(video)

        film = catalog_store.get_by_path(copy)
        assert [vf.path for vf in film.volume_files] == [copy]

    def test_delete_unknown_path(self, catalog_store: SQLModelCatalogStore) -> None:
        with pytest.raises(PathNotFoundError):
            catalog_store.delete_volume_file(Path("/nowhere.mkv"))

    def test_delete_volume_files(
        self,
        catalog_store: SQLModelCatalogStore,
        volume_repository: SQLModelVolumeRepository,
        volume: Volume,
        video: Path,
        tmp_path: Path,
    ) -> None:
        other = volume_repository.save(Volume(name="Autres", path=tmp_path / "autres"))
        catalog_store.add(_film(video, volume))
        catalog_store.add_volume_file_to_existing(_film(other.path / "pb.mkv", other))
        catalog_store.add(_film(volume.path / "Heat.mkv", volume, tmdb_id=949))

        deleted = catalog_store.delete_volume_files(volume.id)

        assert deleted == 2
        films = catalog_store.get_all()
        assert [f.tmdb_id for f in films] == [1817]
        assert [vf.path for vf in films[0].volume_files] == [other.path / "pb.mkv"]


class TestSubtitles:
    """Tests pour le rattachement des sous-titres."""

    def test_add_and_remove_subtitle(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        catalog_store.add(_film(video, volume))
        srt = volume.path / "Phone.Booth.2002.fr.srt"

        catalog_store.add_subtitle(video, Subtitle(path=srt, language="fr"))

        assert catalog_store.is_subtitle_path_present(srt)
        subtitles = catalog_store.get_by_path(video).volume_files[0].subtitles
        assert subtitles == [Subtitle(path=srt, language="fr")]

        catalog_store.remove_subtitle(video, srt)

        assert not catalog_store.is_subtitle_path_present(srt)

    def test_duplicate_subtitle_conflicts(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        catalog_store.add(_film(video, volume))
        subtitle = Subtitle(path=volume.path / "Phone.Booth.2002.srt")
        catalog_store.add_subtitle(video, subtitle)

        with pytest.raises(ConflictError):
            catalog_store.add_subtitle(video, subtitle)

    def test_subtitle_for_unknown_video(self, catalog_store: SQLModelCatalogStore) -> None:
        with pytest.raises(PathNotFoundError):
            catalog_store.add_subtitle(Path("/nowhere.mkv"), Subtitle(path=Path("/x.srt")))

    def test_remove_absent_subtitle(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        catalog_store.add(_film(video, volume))

        with pytest.raises(PathNotFoundError):
            catalog_store.remove_subtitle(video, volume.path / "absent.srt")

    def test_duplicate_subtitles_stored_once(
        self, catalog_store: SQLModelCatalogStore, volume: Volume, video: Path
    ) -> None:
        srt = volume.path / "Phone.Booth.2002.srt"
        film = _film(video, volume)
        film.volume_files[0].subtitles = [Subtitle(path=srt), Subtitle(path=srt)]

        stored = catalog_store.add(film)

        assert len(stored.volume_files[0].subtitles) == 1


class TestFailedWrites:
    """Tests pour l'annulation des ecritures en echec."""

    def test_failed_commit_rolls_back_and_store_stays_usable(
        self,
        catalog_store: SQLModelCatalogStore,
        session: Session,
        volume: Volume,
        video: Path,
    ) -> None:
        failure = OperationalError("COMMIT", {}, Exception("disk I/O error"))
        with patch.object(session, "commit", side_effect=failure):
            with pytest.raises(InvariantViolationError):
                catalog_store.add(_film(video, volume))

        assert not catalog_store.is_path_present(video)
        stored = catalog_store.add(_film(video, volume))
        assert catalog_store.get_by_path(video).id == stored.id
