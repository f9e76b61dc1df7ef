#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

    python main.py render my_photo.jpg -o output/mosaic.png

Or use the full CLI:

    python -m tile_mosaic.cli render --help
    python -m tile_mosaic.cli compare my_photo.jpg --runs 10
"""

from tile_mosaic.cli import app

if __name__ == "__main__":
    app()
