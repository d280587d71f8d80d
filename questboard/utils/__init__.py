# File: utils/__init__.py
"""Pure Python utilities for Quest Board.

Nothing in this package may import managers, the coordinator or const.py, so
every function here can be unit tested in isolation.

Submodules:
    - dt_utils: Date/time parsing, local day keys, HH:MM handling, windows
    - math_utils: Half-up rounding, clamping, numeric coercion

Usage:
    from . import dt_utils
    from .math_utils import round_half_up
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
