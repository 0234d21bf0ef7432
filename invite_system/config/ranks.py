"""
Invite tier configuration and constants.

Tiers are half-open bands over the real invite count:
    bronze    1-13
    prata    14-29
    ouro     30-59
    platina  60-99
    diamante 100+
"""
from enum import Enum
from typing import List, Tuple


class Tier(Enum):
    """Invite tier enumeration."""
    NONE = "none"
    BRONZE = "bronze"
    PRATA = "prata"
    OURO = "ouro"
    PLATINA = "platina"
    DIAMANTE = "diamante"

    @property
    def display_name(self) -> str:
        if self is Tier.NONE:
            return "SEM RANK"
        return self.name


# (tier, minimum count), ascending. NONE covers everything below the first band.
TIER_THRESHOLDS: List[Tuple[Tier, int]] = [
    (Tier.BRONZE, 1),
    (Tier.PRATA, 14),
    (Tier.OURO, 30),
    (Tier.PLATINA, 60),
    (Tier.DIAMANTE, 100),
]
