"""
Main entry point for running dashtile as a module.

Usage:
    python -m dashtile STORE_DIR ENTITY_ID [--add KIND ...] [-o preview.png]
"""

from .dashboard import main

if __name__ == "__main__":
    import sys

    sys.exit(main())
