"""Allow ``python -m potluck``."""

import sys

from potluck.cli import main

sys.exit(main())
