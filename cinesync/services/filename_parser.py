"""
Parsing heuristique des noms de fichiers de films.

Extrait un titre, une année de sortie et une résolution depuis un nom de
fichier (sans le répertoire). Le nom est découpé sur les points et les
espaces ; l'extension fait partie des jetons.

Les jetons sont parcourus depuis la fin : un titre contenant lui-même un
nombre à 4 chiffres reste une approximation connue (ex: "1917.mkv" donne
un titre vide et l'année 1917).
"""

import re

from cinesync.core.value_objects import ParsedFilename

_SEPARATORS = re.compile(r"[. ]+")
_YEAR_PATTERN = re.compile(r"^(?:(\d{4})|\((\d{4})\))$")
_RESOLUTION_PATTERNS = (
    re.compile(r"^\d{3,4}[pP]$"),
    re.compile(r"^\d[kK]$"),
)


def tokenize(filename: str) -> list[str]:
    """Découpe un nom de fichier sur les points et les espaces."""
    return [token for token in _SEPARATORS.split(filename) if token]


def find_year(tokens: list[str]) -> tuple[int, int]:
    """
    Cherche le jeton d'année en partant de la fin.

    Args:
        tokens: Jetons du nom de fichier

    Returns:
        Tuple (index du jeton, année), ou (-1, 0) si aucun jeton ne correspond
    """
    for index in range(len(tokens) - 1, -1, -1):
        match = _YEAR_PATTERN.match(tokens[index])
        if match:
            return index, int(match.group(1) or match.group(2))
    return -1, 0


def find_resolution(tokens: list[str]) -> str:
    """Retourne le dernier jeton de résolution (1080p, 4K...), ou une chaine vide."""
    for token in reversed(tokens):
        if any(pattern.match(token) for pattern in _RESOLUTION_PATTERNS):
            return token
    return ""


def parse_filename(filename: str) -> ParsedFilename:
    """
    Devine le titre, l'année et la résolution d'un fichier.

    Le titre est formé des jetons précédant l'année. Sans année (ou avec
    une année nulle), tous les jetons forment le titre, extension comprise.

    Args:
        filename: Nom du fichier (ex: "Movie.Title.2020.1080p.mkv")

    Returns:
        ParsedFilename avec name, year (0 si absente) et resolution
    """
    tokens = tokenize(filename)
    index, year = find_year(tokens)

    if year > 0:
        name = " ".join(tokens[:index])
    else:
        name = " ".join(tokens)

    return ParsedFilename(
        name=name,
        year=year,
        resolution=find_resolution(tokens),
    )
