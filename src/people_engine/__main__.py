"""Entry point for ``python -m people_engine``."""

import sys

from people_engine.cli import main

if __name__ == "__main__":
    sys.exit(main())
