"""Entry point for ``python -m mdfmt``."""

import sys

from mdfmt.cli import main

sys.exit(main())
