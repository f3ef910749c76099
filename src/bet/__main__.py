"""Allow ``python -m bet``."""

import sys

from bet.main import main

sys.exit(main())
