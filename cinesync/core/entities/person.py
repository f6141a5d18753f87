"""
Entité personne (acteur, réalisateur, scénariste).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Person:
    """
    Personne référencée par le casting ou l'équipe d'un film.

    Créée à la première référence, jamais supprimée, dédoublonnée par tmdb_id.

    Attributs :
        id : Identifiant attribué par le stockage
        tmdb_id : ID TMDB de la personne
        name : Nom
        photo_path : Clé d'image TMDB
        biography : Biographie
        birthday : Date de naissance (YYYY-MM-DD)
        deathday : Date de décès (YYYY-MM-DD)
        imdb_id : ID IMDb (format nmXXXXXXX)
    """

    tmdb_id: int
    name: str = ""
    photo_path: Optional[str] = None
    biography: Optional[str] = None
    birthday: Optional[str] = None
    deathday: Optional[str] = None
    imdb_id: Optional[str] = None
    id: Optional[str] = None
