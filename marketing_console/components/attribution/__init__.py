"""
Attribution component - revenue, orders and sends per agent or message.
"""

from .component import attribute, compare
from .models import DIMENSION_KEYS, AttributionRow, ComparePair, Dimension

__all__ = [
    # Entry points
    "attribute",
    "compare",
    # Models
    "AttributionRow",
    "ComparePair",
    "Dimension",
    "DIMENSION_KEYS",
]
