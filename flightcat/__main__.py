"""Allow `python -m flightcat`."""

import sys

from flightcat.cli import main

sys.exit(main())
