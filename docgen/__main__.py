"""
Entry point for running docgen as a module.

Usage:
    python -m docgen generate enrollment data.json --output enrollment.pdf
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main() or 0)
