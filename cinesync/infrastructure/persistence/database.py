"""
Acces a la base SQLite du catalogue.

Ce module fournit :
- Une fabrique d'engine (fichier ou memoire) avec les pragmas SQLite
- L'engine global de l'application, cree a la premiere utilisation
- Le generateur de session et l'initialisation des tables

L'URL est configuree via CINESYNC_DATABASE_URL (defaut: sqlite:///cinesync.db).
"""

from collections.abc import Callable, Generator
from functools import wraps
from pathlib import Path
from typing import Any, Optional, TypeVar

from sqlalchemy import Engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from cinesync.core.errors import InvariantViolationError

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")

_engine: Optional[Engine] = None

_F = TypeVar("_F", bound=Callable[..., Any])


def _set_sqlite_pragmas(dbapi_connection, _connection_record) -> None:
    """Active le journal WAL sur chaque nouvelle connexion."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    """
    Cree un engine SQLite pour l'URL donnee.

    Une base en memoire partage une connexion unique (StaticPool) ; pour
    une base fichier, le repertoire parent est cree si besoin.

    Args:
        database_url: URL SQLAlchemy (ex: "sqlite:///data/cinesync.db")

    Returns:
        Engine configure
    """
    if database_url in _MEMORY_URLS:
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        if database_url.startswith("sqlite:///"):
            Path(database_url.removeprefix("sqlite:///")).parent.mkdir(
                parents=True, exist_ok=True
            )
        engine = create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def get_engine() -> Engine:
    """Retourne l'engine de l'application, cree depuis Settings au premier appel."""
    global _engine
    if _engine is None:
        from cinesync.config import Settings

        _engine = create_db_engine(Settings().database_url)
    return _engine


def get_session() -> Generator[Session, None, None]:
    """
    Generateur de session SQLModel.

    Utilisation avec next() :
        session = next(get_session())
    """
    with Session(get_engine()) as session:
        yield session


def transactional(method: _F) -> _F:
    """
    Decorateur pour les ecritures des repositories.

    Une erreur SQLAlchemy annule la transaction de la session (qui reste
    utilisable par les appels suivants) et remonte en InvariantViolationError.
    L'instance decoree doit exposer sa session dans self._session.
    """

    @wraps(method)
    def wrapper(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self._session.rollback()
            raise InvariantViolationError(f"Ecriture {method.__name__} annulee : {e}") from e

    return wrapper  # type: ignore[return-value]


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Cree les tables manquantes.

    Doit etre appelee une fois au demarrage de l'application.

    Args:
        engine: Engine cible (defaut: engine de l'application)
    """
    from cinesync.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
