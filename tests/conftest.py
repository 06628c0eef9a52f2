"""Pytest bootstrap for local source imports.

The project is a flat set of top-level modules. Make sure the repository
root is importable when the ``pytest`` console script runs from elsewhere.
"""

from __future__ import annotations

import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)
