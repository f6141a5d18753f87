"""
Point d'entrée CLI de CineSync.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from cinesync import __version__
from cinesync.adapters.cli.commands import (
    relink,
    sync,
    volume_add,
    volume_delete,
    volumes,
    watch,
)
from cinesync.config import Settings
from cinesync.container import Container
from cinesync.logging_config import configure_logging

app = typer.Typer(
    name="cinesync",
    help="Synchronisation d'un catalogue de films avec des volumes",
)
container = Container()

_VERBOSE_LEVELS = {0: None, 1: "INFO", 2: "DEBUG"}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """CineSync - Catalogue de films synchronise avec les volumes."""
    settings = get_config()
    if quiet:
        level = "ERROR"
    else:
        level = _VERBOSE_LEVELS.get(min(verbose, 2)) or settings.log_level
    configure_logging(
        log_level=level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )


app.command(name="volume-add")(volume_add)
app.command()(volumes)
app.command(name="volume-delete")(volume_delete)
app.command()(sync)
app.command()(watch)
app.command()(relink)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration CineSync")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"API TMDB : {'activée' if config.tmdb_enabled else 'désactivée'}")
    typer.echo(f"Langue TMDB : {config.tmdb_language}")
    typer.echo(f"Cache API : {config.api_cache_dir}")
    typer.echo(f"Scrutation des écritures : {config.watch_poll_interval} s")
    typer.echo(f"Workers de scan : {config.scan_workers}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"CineSync v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    logger.info("Démarrage de CineSync", version=__version__)
    app()


if __name__ == "__main__":
    main()
