"""
Entry Point - Module Execution

This module serves as the entry point when running the package as a module:
    python -m deviceclient

All argument parsing and monitor logic is in cli.py.
"""

import sys

from deviceclient.cli import main

if __name__ == "__main__":
    sys.exit(main())
