"""
Objet valeur pour le résultat du parsing d'un nom de fichier.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParsedFilename:
    """
    Informations devinées depuis un nom de fichier.

    Heuristique : les valeurs peuvent être fausses mais sont toujours présentes.

    Attributs :
        name : Titre deviné (jetons précédant l'année, joints par des espaces)
        year : Année de sortie (0 si absente)
        resolution : Résolution trouvée dans le nom (vide si absente)
    """

    name: str
    year: int = 0
    resolution: str = ""
