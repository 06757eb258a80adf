"""Allow ``python -m weekend_tracer``."""

import sys

from weekend_tracer.cli import main

sys.exit(main())
