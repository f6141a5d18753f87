"""
Implementation SQLModel du repository Person.
"""

from typing import Optional

from sqlmodel import Session, select

from cinesync.core.entities import Person
from cinesync.core.ports.repositories import IPersonRepository
from cinesync.infrastructure.persistence.database import transactional
from cinesync.infrastructure.persistence.models import PersonModel


class SQLModelPersonRepository(IPersonRepository):
    """
    Repository SQLModel pour les personnes.

    Les personnes sont dedoublonnees par tmdb_id : sauvegarder une personne
    deja connue met a jour l'enregistrement existant.
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: PersonModel) -> Person:
        """Convertit un modele DB en entite domaine."""
        return Person(
            id=str(model.id),
            tmdb_id=model.tmdb_id,
            name=model.name,
            photo_path=model.photo_path,
            biography=model.biography,
            birthday=model.birthday,
            deathday=model.deathday,
            imdb_id=model.imdb_id,
        )

    def _get_model(self, tmdb_id: int) -> Optional[PersonModel]:
        statement = select(PersonModel).where(PersonModel.tmdb_id == tmdb_id)
        return self._session.exec(statement).first()

    def is_present(self, tmdb_id: int) -> bool:
        """Verifie si une personne porte cet ID TMDB."""
        return self._get_model(tmdb_id) is not None

    def get_by_tmdb_id(self, tmdb_id: int) -> Optional[Person]:
        """Recupere une personne par son ID TMDB."""
        model = self._get_model(tmdb_id)
        if model:
            return self._to_entity(model)
        return None

    @transactional
    def save(self, person: Person) -> Person:
        """Sauvegarde une personne (insertion ou mise a jour par tmdb_id)."""
        model = self._get_model(person.tmdb_id) or PersonModel(tmdb_id=person.tmdb_id)
        model.name = person.name
        model.photo_path = person.photo_path
        model.biography = person.biography
        model.birthday = person.birthday
        model.deathday = person.deathday
        model.imdb_id = person.imdb_id

        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)
