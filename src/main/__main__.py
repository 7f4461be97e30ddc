"""
Main module entry point.

This allows running the insight generator as: python -m src.main
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
