"""
Count -> tier derivation.
Pure functions, no side effects.
"""
from dataclasses import dataclass
from typing import Mapping, Optional

from invite_system.config.ranks import Tier, TIER_THRESHOLDS


@dataclass(frozen=True)
class NextTierInfo:
    next: Optional[Tier]
    missing: int


def tier_for(count: int) -> Tier:
    """
    Map a real invite count to its tier.

    Negative counts are treated as 0.
    """
    current = Tier.NONE
    for tier, minimum in TIER_THRESHOLDS:
        if count >= minimum:
            current = tier
        else:
            break
    return current


def role_for_tier(tier: Tier, tier_role_ids: Mapping[Tier, str]) -> Optional[str]:
    """External role id for a tier, None for NONE or an unmapped tier."""
    if tier is Tier.NONE:
        return None
    return tier_role_ids.get(tier) or None


def next_tier_info(count: int) -> NextTierInfo:
    """Next band above count and how many real invites are missing to reach it."""
    count = max(count, 0)
    for tier, minimum in TIER_THRESHOLDS:
        if count < minimum:
            return NextTierInfo(next=tier, missing=minimum - count)
    return NextTierInfo(next=None, missing=0)


@dataclass(frozen=True)
class RankSummary:
    count: int
    tier: Tier
    next_tier: Optional[Tier]
    missing: int

    @property
    def tierName(self) -> str:
        return self.tier.display_name

    @property
    def nextTierName(self) -> Optional[str]:
        return self.next_tier.display_name if self.next_tier else None


def summarize(count: int) -> RankSummary:
    info = next_tier_info(count)
    return RankSummary(count=count, tier=tier_for(count), next_tier=info.next, missing=info.missing)
