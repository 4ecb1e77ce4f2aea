"""Mini README: Utility helpers shared across RoadLedger.

Exports the forgiving number parser applied to every monetary or numeric
field before it reaches a calculation.
"""

from .numbers import parse_number

__all__ = ["parse_number"]
