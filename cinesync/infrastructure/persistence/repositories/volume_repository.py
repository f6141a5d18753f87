"""
Implementation SQLModel du repository Volume.
"""

from pathlib import Path
from typing import Optional

from sqlmodel import Session, select

from cinesync.core.entities import MediaKind, Volume
from cinesync.core.ports.repositories import IVolumeRepository
from cinesync.infrastructure.persistence.database import transactional
from cinesync.infrastructure.persistence.models import VolumeModel


class SQLModelVolumeRepository(IVolumeRepository):
    """
    Repository SQLModel pour les volumes.

    Implemente IVolumeRepository avec conversion bidirectionnelle
    entre l'entite Volume (domaine) et VolumeModel (persistance).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: VolumeModel) -> Volume:
        """Convertit un modele DB en entite domaine."""
        return Volume(
            id=str(model.id),
            name=model.name,
            path=Path(model.path),
            is_recursive=model.is_recursive,
            media_kind=MediaKind(model.media_kind),
        )

    def get_by_id(self, volume_id: str) -> Optional[Volume]:
        """Recupere un volume par son ID."""
        model = self._session.get(VolumeModel, int(volume_id))
        if model:
            return self._to_entity(model)
        return None

    def get_all(self) -> list[Volume]:
        """Liste tous les volumes, par ordre de creation."""
        statement = select(VolumeModel).order_by(VolumeModel.id)
        return [self._to_entity(model) for model in self._session.exec(statement).all()]

    @transactional
    def save(self, volume: Volume) -> Volume:
        """Sauvegarde un volume (insertion ou mise a jour)."""
        existing = self._session.get(VolumeModel, int(volume.id)) if volume.id else None

        if existing:
            existing.name = volume.name
            existing.path = str(volume.path)
            existing.is_recursive = volume.is_recursive
            existing.media_kind = volume.media_kind.value
            model = existing
        else:
            model = VolumeModel(
                name=volume.name,
                path=str(volume.path),
                is_recursive=volume.is_recursive,
                media_kind=volume.media_kind.value,
            )

        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    @transactional
    def delete(self, volume_id: str) -> bool:
        """Supprime un volume par ID. Retourne True si supprime."""
        model = self._session.get(VolumeModel, int(volume_id))
        if model is None:
            return False
        self._session.delete(model)
        self._session.commit()
        return True
