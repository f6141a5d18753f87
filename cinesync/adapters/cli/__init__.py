"""Commandes CLI de CineSync (typer + rich)."""
