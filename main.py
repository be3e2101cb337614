#!/usr/bin/env python3
"""
main.py - Quick-start entry point.

    python main.py dither my_photo.jpg --palette lego --kernel 1

Or use the full CLI:

    python -m brick_icon.cli dither --help
    python -m brick_icon.cli palettes
"""

from brick_icon.cli import app

if __name__ == "__main__":
    app()
