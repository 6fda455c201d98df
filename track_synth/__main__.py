"""Allow ``python -m track_synth``."""

import sys

from .main import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    sys.exit(main())
