"""
Implementation SQLModel du stockage du catalogue.

Implemente l'interface ICatalogStore : une entree (FilmModel) et ses
copies (VolumeFileModel), chacune avec ses sous-titres (SubtitleModel).
Chaque operation publique valide sa propre transaction.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from sqlmodel import Session, col, select

from cinesync.core.entities import Character, Film, Subtitle, VolumeFile
from cinesync.core.errors import (
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    PathNotFoundError,
)
from cinesync.core.ports.repositories import ICatalogStore
from cinesync.core.value_objects import (
    AudioTrack,
    MediaInfo,
    Resolution,
    SubtitleTrack,
    VideoTrack,
)
from cinesync.infrastructure.persistence.database import transactional
from cinesync.infrastructure.persistence.models import (
    FilmModel,
    SubtitleModel,
    VolumeFileModel,
    utcnow,
)


def media_info_to_json(media_info: Optional[MediaInfo]) -> Optional[str]:
    """Serialise les informations techniques en JSON."""
    if media_info is None:
        return None
    return json.dumps(asdict(media_info))


def media_info_from_json(raw: Optional[str]) -> Optional[MediaInfo]:
    """Reconstruit les informations techniques depuis leur JSON."""
    if not raw:
        return None
    data = json.loads(raw)

    video_tracks = []
    for track in data.get("video_tracks", []):
        resolution = track.pop("resolution", None)
        video_tracks.append(
            VideoTrack(
                **track,
                resolution=Resolution(**resolution) if resolution else None,
            )
        )

    return MediaInfo(
        format=data.get("format"),
        file_size=data.get("file_size"),
        duration_seconds=data.get("duration_seconds"),
        video_tracks=tuple(video_tracks),
        audio_tracks=tuple(AudioTrack(**t) for t in data.get("audio_tracks", [])),
        subtitle_tracks=tuple(SubtitleTrack(**t) for t in data.get("subtitle_tracks", [])),
    )


def _dumps(values: list) -> Optional[str]:
    return json.dumps(values) if values else None


def _loads(raw: Optional[str]) -> list:
    return json.loads(raw) if raw else []


class SQLModelCatalogStore(ICatalogStore):
    """
    Stockage SQLModel des entrees du catalogue.

    Implemente ICatalogStore avec conversion bidirectionnelle entre
    l'entite Film (domaine) et les modeles FilmModel / VolumeFileModel /
    SubtitleModel (persistance).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le stockage avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _to_entity(self, model: FilmModel) -> Film:
        """
        Convertit un modele DB et ses copies en entite domaine.

        Args :
            model : Le modele FilmModel depuis la DB

        Retourne :
            L'entite Film correspondante, copies ordonnees par position
        """
        volume_files = [
            self._volume_file_to_entity(vf_model)
            for vf_model in self._volume_file_models(model.id)
        ]
        return Film(
            id=str(model.id),
            tmdb_id=model.tmdb_id,
            imdb_id=model.imdb_id,
            guessed_name=model.guessed_name,
            guessed_year=model.guessed_year,
            guessed_resolution=model.guessed_resolution,
            title=model.title,
            original_title=model.original_title,
            year=model.year,
            runtime=model.runtime,
            tagline=model.tagline,
            overview=model.overview,
            poster_path=model.poster_path,
            backdrop_path=model.backdrop_path,
            classification=model.classification,
            genres=_loads(model.genres_json),
            countries=_loads(model.countries_json),
            directors=_loads(model.directors_json),
            writers=_loads(model.writers_json),
            cast=[Character(**character) for character in _loads(model.cast_json)],
            imdb_rating=model.imdb_rating,
            letterboxd_rating=model.letterboxd_rating,
            volume_files=volume_files,
        )

    def _volume_file_to_entity(self, model: VolumeFileModel) -> VolumeFile:
        """Convertit une copie et ses sous-titres en entite domaine."""
        statement = (
            select(SubtitleModel)
            .where(SubtitleModel.volume_file_id == model.id)
            .order_by(SubtitleModel.id)
        )
        subtitles = [
            Subtitle(path=Path(sub.path), language=sub.language)
            for sub in self._session.exec(statement).all()
        ]
        return VolumeFile(
            path=Path(model.path),
            volume_id=str(model.volume_id) if model.volume_id is not None else None,
            media_info=media_info_from_json(model.media_info_json),
            subtitles=subtitles,
        )

    def _apply_fields(self, model: FilmModel, entity: Film) -> FilmModel:
        """Copie les champs de l'entite vers le modele."""
        model.tmdb_id = entity.tmdb_id
        model.imdb_id = entity.imdb_id
        model.guessed_name = entity.guessed_name
        model.guessed_year = entity.guessed_year
        model.guessed_resolution = entity.guessed_resolution
        model.title = entity.title
        model.original_title = entity.original_title
        model.year = entity.year
        model.runtime = entity.runtime
        model.tagline = entity.tagline
        model.overview = entity.overview
        model.poster_path = entity.poster_path
        model.backdrop_path = entity.backdrop_path
        model.classification = entity.classification
        model.genres_json = _dumps(entity.genres)
        model.countries_json = _dumps(entity.countries)
        model.directors_json = _dumps(entity.directors)
        model.writers_json = _dumps(entity.writers)
        model.cast_json = _dumps([asdict(character) for character in entity.cast])
        model.imdb_rating = entity.imdb_rating
        model.letterboxd_rating = entity.letterboxd_rating
        model.updated_at = utcnow()
        return model

    # ------------------------------------------------------------------
    # Acces aux copies
    # ------------------------------------------------------------------

    def _volume_file_models(self, film_id: Optional[int]) -> list[VolumeFileModel]:
        statement = (
            select(VolumeFileModel)
            .where(VolumeFileModel.film_id == film_id)
            .order_by(VolumeFileModel.position)
        )
        return list(self._session.exec(statement).all())

    def _volume_file_model(self, path: Path) -> Optional[VolumeFileModel]:
        statement = select(VolumeFileModel).where(VolumeFileModel.path == str(path))
        return self._session.exec(statement).first()

    def _insert_volume_file(
        self, film_id: int, position: int, volume_file: VolumeFile
    ) -> None:
        """Insere une copie et ses sous-titres (sans commit)."""
        vf_model = VolumeFileModel(
            film_id=film_id,
            position=position,
            path=str(volume_file.path),
            volume_id=int(volume_file.volume_id) if volume_file.volume_id else None,
            media_info_json=media_info_to_json(volume_file.media_info),
        )
        self._session.add(vf_model)
        self._session.flush()
        self._insert_subtitles(vf_model.id, volume_file.subtitles)

    def _insert_subtitles(self, volume_file_id: int, subtitles: list[Subtitle]) -> None:
        seen: set[Path] = set()
        for subtitle in subtitles:
            if subtitle.path in seen:
                continue
            seen.add(subtitle.path)
            self._session.add(
                SubtitleModel(
                    volume_file_id=volume_file_id,
                    path=str(subtitle.path),
                    language=subtitle.language,
                )
            )

    def _delete_subtitles(self, volume_file_id: Optional[int]) -> None:
        statement = select(SubtitleModel).where(
            SubtitleModel.volume_file_id == volume_file_id
        )
        for sub in self._session.exec(statement).all():
            self._session.delete(sub)

    def _delete_volume_file_model(self, vf_model: VolumeFileModel) -> None:
        self._delete_subtitles(vf_model.id)
        self._session.delete(vf_model)

    def _ensure_paths_free(self, film: Film, owner_id: Optional[int]) -> None:
        """Leve ConflictError si une copie de film appartient a une autre entree."""
        for volume_file in film.volume_files:
            existing = self._volume_file_model(volume_file.path)
            if existing is not None and existing.film_id != owner_id:
                raise ConflictError(f"Copie deja cataloguee : {volume_file.path}")

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    def is_path_present(self, path: Path) -> bool:
        """Verifie si un chemin video est reference par une entree."""
        return self._volume_file_model(path) is not None

    def is_subtitle_path_present(self, path: Path) -> bool:
        """Verifie si un chemin de sous-titres est reference par une copie."""
        statement = select(SubtitleModel).where(SubtitleModel.path == str(path))
        return self._session.exec(statement).first() is not None

    def get_by_path(self, path: Path) -> Film:
        """Recupere l'entree possedant une copie a ce chemin."""
        vf_model = self._volume_file_model(path)
        if vf_model is None:
            raise PathNotFoundError(path)
        model = self._session.get(FilmModel, vf_model.film_id)
        if model is None:
            raise PathNotFoundError(path)
        return self._to_entity(model)

    def get_by_volume(self, volume_id: str) -> list[Film]:
        """Liste les entrees ayant au moins une copie sur ce volume."""
        statement = (
            select(FilmModel)
            .where(
                col(FilmModel.id).in_(
                    select(VolumeFileModel.film_id).where(
                        VolumeFileModel.volume_id == int(volume_id)
                    )
                )
            )
            .order_by(FilmModel.id)
        )
        return [self._to_entity(model) for model in self._session.exec(statement).all()]

    def get_by_id(self, film_id: str) -> Optional[Film]:
        """Recupere une entree par son ID interne."""
        model = self._session.get(FilmModel, int(film_id))
        if model:
            return self._to_entity(model)
        return None

    def get_all(self) -> list[Film]:
        """Liste toutes les entrees du catalogue."""
        statement = select(FilmModel).order_by(FilmModel.id)
        return [self._to_entity(model) for model in self._session.exec(statement).all()]

    def is_present(self, tmdb_id: int) -> bool:
        """Verifie si une entree porte cet ID TMDB."""
        statement = select(FilmModel).where(FilmModel.tmdb_id == tmdb_id)
        return self._session.exec(statement).first() is not None

    # ------------------------------------------------------------------
    # Ecriture
    # ------------------------------------------------------------------

    @transactional
    def add(self, film: Film) -> Film:
        """
        Insere une entree, ou la remplace entierement si son ID existe.

        Les copies de l'entree sont reecrites dans l'ordre de film.volume_files.
        """
        existing = self._session.get(FilmModel, int(film.id)) if film.id else None
        self._ensure_paths_free(film, existing.id if existing else None)

        if existing:
            model = self._apply_fields(existing, film)
            for vf_model in self._volume_file_models(model.id):
                self._delete_volume_file_model(vf_model)
            self._session.flush()
        else:
            model = self._apply_fields(FilmModel(), film)

        self._session.add(model)
        self._session.flush()

        for position, volume_file in enumerate(film.volume_files):
            self._insert_volume_file(model.id, position, volume_file)

        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    @transactional
    def add_volume_file_to_existing(self, film: Film) -> Film:
        """Ajoute les copies de film a l'entree portant le meme ID TMDB."""
        statement = select(FilmModel).where(FilmModel.tmdb_id == film.tmdb_id)
        model = self._session.exec(statement).first()
        if model is None:
            raise NotFoundError(f"Aucune entree pour l'ID TMDB {film.tmdb_id}")

        for volume_file in film.volume_files:
            if self._volume_file_model(volume_file.path) is not None:
                raise ConflictError(f"Copie deja cataloguee : {volume_file.path}")

        position = len(self._volume_file_models(model.id))
        for volume_file in film.volume_files:
            self._insert_volume_file(model.id, position, volume_file)
            position += 1

        model.updated_at = utcnow()
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    @transactional
    def replace_volume_file(
        self, film: Film, old_path: Path, volume_file: VolumeFile
    ) -> Film:
        """Remplace sur place la copie old_path de l'entree film."""
        vf_model = self._volume_file_model(old_path)
        if vf_model is None or film.id is None or vf_model.film_id != int(film.id):
            raise InvariantViolationError(
                f"Copie {old_path} absente de l'entree {film.id}"
            )

        if volume_file.path != old_path:
            occupant = self._volume_file_model(volume_file.path)
            if occupant is not None:
                raise ConflictError(f"Copie deja cataloguee : {volume_file.path}")

        vf_model.path = str(volume_file.path)
        vf_model.volume_id = int(volume_file.volume_id) if volume_file.volume_id else None
        vf_model.media_info_json = media_info_to_json(volume_file.media_info)
        self._delete_subtitles(vf_model.id)
        self._session.add(vf_model)
        self._session.flush()
        self._insert_subtitles(vf_model.id, volume_file.subtitles)
        self._session.commit()

        model = self._session.get(FilmModel, vf_model.film_id)
        return self._to_entity(model)

    @transactional
    def delete_volume_file(self, path: Path) -> None:
        """Supprime la copie a ce chemin, et l'entree si c'etait la derniere."""
        vf_model = self._volume_file_model(path)
        if vf_model is None:
            raise PathNotFoundError(path)

        film_id = vf_model.film_id
        self._delete_volume_file_model(vf_model)
        self._session.flush()
        self._delete_film_if_empty(film_id)
        self._session.commit()

    def _delete_film_if_empty(self, film_id: int) -> bool:
        if self._volume_file_models(film_id):
            return False
        model = self._session.get(FilmModel, film_id)
        if model is not None:
            self._session.delete(model)
        return True

    @transactional
    def add_subtitle(self, media_path: Path, subtitle: Subtitle) -> None:
        """Rattache un sous-titre a la copie media_path."""
        vf_model = self._volume_file_model(media_path)
        if vf_model is None:
            raise PathNotFoundError(media_path)

        statement = select(SubtitleModel).where(
            SubtitleModel.volume_file_id == vf_model.id,
            SubtitleModel.path == str(subtitle.path),
        )
        if self._session.exec(statement).first() is not None:
            raise ConflictError(f"Sous-titre deja rattache : {subtitle.path}")

        self._session.add(
            SubtitleModel(
                volume_file_id=vf_model.id,
                path=str(subtitle.path),
                language=subtitle.language,
            )
        )
        self._session.commit()

    @transactional
    def remove_subtitle(self, media_path: Path, subtitle_path: Path) -> None:
        """Detache un sous-titre de la copie media_path."""
        vf_model = self._volume_file_model(media_path)
        if vf_model is None:
            raise PathNotFoundError(media_path)

        statement = select(SubtitleModel).where(
            SubtitleModel.volume_file_id == vf_model.id,
            SubtitleModel.path == str(subtitle_path),
        )
        sub = self._session.exec(statement).first()
        if sub is None:
            raise PathNotFoundError(subtitle_path)

        self._session.delete(sub)
        self._session.commit()

    @transactional
    def delete_volume_files(self, volume_id: str) -> int:
        """Supprime toutes les copies d'un volume et les entrees laissees vides."""
        statement = select(VolumeFileModel).where(
            VolumeFileModel.volume_id == int(volume_id)
        )
        vf_models = list(self._session.exec(statement).all())
        film_ids = {vf_model.film_id for vf_model in vf_models}

        for vf_model in vf_models:
            self._delete_volume_file_model(vf_model)
        self._session.flush()

        for film_id in film_ids:
            self._delete_film_if_empty(film_id)
        self._session.commit()
        return len(vf_models)
