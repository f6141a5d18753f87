"""
Implementations SQLModel des repositories.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit une session SQLModel via injection de dependances
- Convertit entre entites de domaine (dataclass) et modeles DB (SQLModel)
"""

from cinesync.infrastructure.persistence.repositories.catalog_store import (
    SQLModelCatalogStore,
)
from cinesync.infrastructure.persistence.repositories.person_repository import (
    SQLModelPersonRepository,
)
from cinesync.infrastructure.persistence.repositories.volume_repository import (
    SQLModelVolumeRepository,
)

__all__ = [
    "SQLModelCatalogStore",
    "SQLModelVolumeRepository",
    "SQLModelPersonRepository",
]
