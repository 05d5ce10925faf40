"""Allow ``python -m genomeannot``."""

import sys

from genomeannot.cli import main

if __name__ == "__main__":
    sys.exit(main())
