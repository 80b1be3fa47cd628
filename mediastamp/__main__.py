"""Entry point for python -m mediastamp."""

import sys

from mediastamp.cli.main import main


if __name__ == "__main__":
    sys.exit(main())
