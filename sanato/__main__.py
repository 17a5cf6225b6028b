"""Allow ``python -m sanato``."""

import sys

from sanato.cli import main

if __name__ == "__main__":
    sys.exit(main())
