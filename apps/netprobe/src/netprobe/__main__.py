"""Allow ``python -m netprobe``."""

import sys

from .cli import main

sys.exit(main())
