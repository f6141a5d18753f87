"""
Couche adaptateurs (infrastructure).

Les adaptateurs implémentent les ports définis dans core/ports/ et fournissent
des implémentations concrètes pour les systèmes externes.

Sous-packages :
- api/ : Clients API externes (TMDB, notes IMDb et Letterboxd)
- parsing/ : Extraction des informations techniques via mediainfo
- watchdog_backend : Surveillance du systeme de fichiers via watchdog
- cli/ : Commandes en ligne de commande (typer + rich)

Chaque adaptateur dépend de core/ mais core/ ne dépend jamais des adaptateurs.
"""
