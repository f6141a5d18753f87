"""
Commandes CLI de gestion des volumes, de synchronisation et de surveillance.
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from cinesync.container import Container
from cinesync.core.entities import MediaKind
from cinesync.core.errors import CineSyncError, NotFoundError, VolumeScanError
from cinesync.services.synchronizer import SyncReport

console = Console()


async def _close_clients(container: Container) -> None:
    """Ferme les clients HTTP et le cache des reponses."""
    tmdb_client = container.tmdb_client()
    if tmdb_client is not None:
        await tmdb_client.close()
    await container.ratings_scraper().close()
    container.api_cache().close()


def _sync_table(reports: list[tuple[str, SyncReport]]) -> Table:
    table = Table(title="Synchronisation")
    table.add_column("Volume", style="cyan")
    table.add_column("+ videos", justify="right")
    table.add_column("+ sous-titres", justify="right")
    table.add_column("- videos", justify="right")
    table.add_column("- sous-titres", justify="right")
    table.add_column("Erreurs", justify="right", style="red")
    for name, report in reports:
        table.add_row(
            name,
            str(report.videos_added),
            str(report.subtitles_added),
            str(report.videos_removed),
            str(report.subtitles_removed),
            str(report.errors),
        )
    return table


def volume_add(
    name: Annotated[str, typer.Argument(help="Nom du volume (3 caracteres minimum)")],
    path: Annotated[Path, typer.Argument(help="Racine du volume")],
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="Parcourir les sous-repertoires")
    ] = False,
    kind: Annotated[
        MediaKind, typer.Option("--kind", help="Type de medias du volume")
    ] = MediaKind.MOVIE,
) -> None:
    """Enregistre un volume et ajoute ses videos au catalogue."""
    asyncio.run(_volume_add_async(name, path, recursive, kind))


async def _volume_add_async(
    name: str, path: Path, recursive: bool, kind: MediaKind
) -> None:
    """Implementation async de la commande volume-add."""
    container = Container()
    container.database.init()
    manager = container.volume_manager()

    try:
        volume, scan = await manager.create_volume(name, path, recursive, kind)
        console.print(f"[green]Volume cree:[/green] {volume.name} (id={volume.id})")
        with console.status("Scan initial en cours..."):
            report = await scan
        console.print(
            f"{report.added}/{report.total} videos ajoutees, "
            f"[red]{report.failed} echecs[/red]"
        )
    except CineSyncError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1)
    finally:
        await _close_clients(container)


def volumes() -> None:
    """Liste les volumes enregistres."""
    container = Container()
    container.database.init()

    table = Table(title="Volumes")
    table.add_column("ID", justify="right")
    table.add_column("Nom", style="cyan")
    table.add_column("Chemin")
    table.add_column("Recursif")
    table.add_column("Type")
    for volume in container.volume_manager().list_volumes():
        table.add_row(
            volume.id,
            volume.name,
            str(volume.path),
            "oui" if volume.is_recursive else "non",
            volume.media_kind.value,
        )
    console.print(table)


def volume_delete(
    volume_id: Annotated[str, typer.Argument(help="ID du volume")],
) -> None:
    """Supprime un volume et ses copies du catalogue."""
    container = Container()
    container.database.init()

    try:
        removed = container.volume_manager().delete_volume(volume_id)
    except NotFoundError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"Volume {volume_id} supprime ({removed} copies retirees)")


def sync(
    volume_id: Annotated[
        Optional[str], typer.Argument(help="ID du volume (defaut: tous)")
    ] = None,
) -> None:
    """Synchronise le catalogue avec le contenu des volumes."""
    asyncio.run(_sync_async(volume_id))


async def _sync_async(volume_id: Optional[str]) -> None:
    """Implementation async de la commande sync."""
    container = Container()
    container.database.init()
    manager = container.volume_manager()
    synchronizer = container.synchronizer()

    try:
        if volume_id is None:
            targets = manager.list_volumes()
        else:
            targets = [manager.get_volume(volume_id)]

        reports = []
        for volume in targets:
            try:
                reports.append((volume.name, await synchronizer.sync(volume)))
            except VolumeScanError as e:
                console.print(f"[red]Volume {volume.name} illisible: {e}[/red]")
        console.print(_sync_table(reports))
    except NotFoundError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1)
    finally:
        await _close_clients(container)


def watch() -> None:
    """Synchronise tous les volumes puis surveille leurs changements (Ctrl+C pour arreter)."""
    asyncio.run(_watch_async())


async def _watch_async() -> None:
    """Implementation async de la commande watch."""
    container = Container()
    container.database.init()
    daemon = container.sync_daemon()

    try:
        error = await daemon.run()
    finally:
        await _close_clients(container)

    if error is not None:
        console.print(f"[red]Surveillance interrompue: {error.message}[/red]")
        raise typer.Exit(1)


def relink(
    film_id: Annotated[str, typer.Argument(help="ID interne du film")],
    url: Annotated[str, typer.Argument(help="Lien TMDB, IMDb ou Letterboxd du bon film")],
) -> None:
    """Corrige l'identification d'un film depuis un lien."""
    asyncio.run(_relink_async(film_id, url))


async def _relink_async(film_id: str, url: str) -> None:
    """Implementation async de la commande relink."""
    container = Container()
    container.database.init()

    try:
        film = await container.film_manager().relink_film(film_id, url)
        console.print(
            f"[green]Film {film.id} relie a TMDB {film.tmdb_id}:[/green] {film.display_title}"
        )
    except CineSyncError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1)
    finally:
        await _close_clients(container)
