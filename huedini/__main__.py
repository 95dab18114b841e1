"""Main entry point for huedini package.

This module allows the package to be executed as:
    python -m huedini [args...]
"""

from .cli import main

if __name__ == "__main__":
    main()
