"""Allow ``python -m gitcheckout.core.credential``."""
from __future__ import annotations

import sys

from gitcheckout.core.credential.program import main

if __name__ == "__main__":
    sys.exit(main())
