"""
Main entry point for ttrpg-session-logger.

This allows running the package as a module:
    python -m ttrpg_session_logger run
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
