"""
BeraMap CLI - Inspect GeoJSON files from the command line.

Usage:
    beramap summary areas.geojson
    beramap export areas.geojson --include-metadata
    beramap preview areas.geojson preview.png
"""

from .cli import main

__all__ = ['main']
