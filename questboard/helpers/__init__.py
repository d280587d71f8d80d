"""Read-only helpers built on top of the engines.

Submodules:
    - view_helpers: Derived view values (quest cards, day window, progress,
      challenge cards, boss slot, stats)

Usage:
    from .helpers import view_helpers as vh
"""

from . import view_helpers

__all__ = ["view_helpers"]
