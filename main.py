"""Entry point for running the TUI directly with `python main.py`."""

import sys

from qr_authenticator.cli import main

if __name__ == "__main__":
    sys.exit(main())
