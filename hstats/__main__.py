"""Allow ``python -m hstats``."""

import sys

from hstats.cli import main

if __name__ == "__main__":
    sys.exit(main())
