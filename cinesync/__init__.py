"""
CineSync - Catalogue de films synchronise avec des volumes de fichiers.

Ce package maintient un catalogue de films coherent avec un ensemble de
volumes (repertoires contenant des films et leurs sous-titres), surveille
les modifications en direct et enrichit chaque entree via TMDB.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, erreurs)
- services/ : Couche application (synchronisation, surveillance, enrichissement)
- adapters/ : Couche infrastructure (clients API, mediainfo, watchdog)
- infrastructure/ : Persistance SQLModel
"""

__version__ = "0.1.0"
