"""Allow ``python -m dailylessons``."""

import sys

from dailylessons.bot import main

if __name__ == "__main__":
    sys.exit(main())
