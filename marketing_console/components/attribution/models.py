"""
Attribution component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Dimension = Literal["agent", "message"]

DIMENSION_KEYS: dict[str, str] = {
    "agent": "agent_id",
    "message": "message_id",
}


@dataclass(frozen=True)
class AttributionRow:
    """
    Revenue, orders and sends credited to one agent or message.

    roi is revenue per send (revenue / sends), not a cost-based return ratio.
    """

    id: str
    name: str
    revenue: float = 0.0
    orders: int = 0
    sends: int = 0
    aov: float = 0.0
    roi: float = 0.0


@dataclass(frozen=True)
class ComparePair:
    """Rows picked for the A/B side table; None when a key is not in the rows."""

    a: AttributionRow | None
    b: AttributionRow | None
