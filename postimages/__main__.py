"""
Main entry point for the postimages package when executed as a module.

This allows running the package with `python -m postimages`.
"""

from postimages.cli import main

if __name__ == '__main__':
    main()
