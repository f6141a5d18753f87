"""
Couche infrastructure : persistance du catalogue.
"""
