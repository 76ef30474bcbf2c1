"""
Package entry point.

Allows running the application via:

    python -m planboard

This simply forwards execution to planboard.cli.main().
"""

from planboard.cli import main

if __name__ == "__main__":
    main()
