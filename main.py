from __future__ import annotations

import sys

from candlechart_host.cli import main


if __name__ == "__main__":
    sys.exit(main())
