"""
Agregat des filtres du catalogue.

Calcule les valeurs proposees pour filtrer le catalogue : bornes des
annees de sortie, decennies, genres et pays de production. L'agregat est
construit depuis le catalogue puis mis a jour film par film ; l'appelant
en detient la reference.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from babelfish import Country

from cinesync.core.entities import Film


def country_name(code: str) -> str:
    """Nom d'un pays depuis son code ISO 3166-1 (le code si inconnu)."""
    try:
        return Country(code.upper()).name.title()
    except ValueError:
        return code


@dataclass
class Decade:
    """Decennie et ses annees, de la plus recente a la plus ancienne."""

    start: int
    years: list[int] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.start}s"


class CatalogFilters:
    """
    Valeurs de filtrage du catalogue.

    Attributs:
        min_year, max_year: Bornes des annees de sortie (None si aucune)
        genres: Genres tries par ordre alphabetique
        countries: Codes pays tries par nom de pays
    """

    def __init__(self) -> None:
        self.min_year: Optional[int] = None
        self.max_year: Optional[int] = None
        self.genres: list[str] = []
        self.countries: list[str] = []

    @classmethod
    def from_films(cls, films: Iterable[Film]) -> "CatalogFilters":
        """Construit l'agregat depuis un ensemble d'entrees."""
        filters = cls()
        for film in films:
            filters._add_year(film)
            filters._add_genres(film)
            filters._add_countries(film)
        filters._sort()
        return filters

    def add_film(self, film: Film) -> None:
        """Met a jour l'agregat avec une nouvelle entree."""
        self._add_year(film)
        self._add_genres(film)
        self._add_countries(film)
        self._sort()

    @property
    def decades(self) -> list[Decade]:
        """Decennies couvrant [min_year, max_year], la plus recente en premier."""
        if self.min_year is None or self.max_year is None:
            return []

        decades: list[Decade] = []
        for year in range(self.max_year, self.min_year - 1, -1):
            start = (year // 10) * 10
            if not decades or decades[-1].start != start:
                decades.append(Decade(start=start))
            decades[-1].years.append(year)
        return decades

    def _add_year(self, film: Film) -> None:
        year = film.year or film.guessed_year
        if not year:
            return
        if self.min_year is None or year < self.min_year:
            self.min_year = year
        if self.max_year is None or year > self.max_year:
            self.max_year = year

    def _add_genres(self, film: Film) -> None:
        for genre in film.genres:
            if genre not in self.genres:
                self.genres.append(genre)

    def _add_countries(self, film: Film) -> None:
        for code in film.countries:
            if code not in self.countries:
                self.countries.append(code)

    def _sort(self) -> None:
        self.genres.sort()
        self.countries.sort(key=country_name)
