"""Allow running as: python -m wherecp"""

import sys

from .cli import main

sys.exit(main())
