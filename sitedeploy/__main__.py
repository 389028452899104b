"""Allow ``python -m sitedeploy``."""

import sys

from .cli import main

sys.exit(main())
