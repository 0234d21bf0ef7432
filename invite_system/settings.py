"""
Immutable settings consumed by the invite tracker.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from invite_system.config.ranks import Tier


@dataclass(frozen=True)
class TrackerSettings:
    invite_channel_id: str
    tier_role_ids: Dict[Tier, str] = field(default_factory=dict)
    min_account_age_days: float = 0
    min_stay_hours: float = 0

    @property
    def all_tier_role_ids(self):
        return [role_id for role_id in self.tier_role_ids.values() if role_id]

    @classmethod
    def from_config(cls, config=None) -> "TrackerSettings":
        """
        Build settings from the Config class.

        Args:
            config: Config class (defaults to config.Config)
        """
        if config is None:
            from config import Config as config

        tier_role_ids = {
            Tier.BRONZE: config.get(config.ROLE_BRONZE_ID),
            Tier.PRATA: config.get(config.ROLE_PRATA_ID),
            Tier.OURO: config.get(config.ROLE_OURO_ID),
            Tier.PLATINA: config.get(config.ROLE_PLATINA_ID),
            Tier.DIAMANTE: config.get(config.ROLE_DIAMANTE_ID),
        }
        return cls(
            invite_channel_id=config.get(config.INVITE_CHANNEL_ID),
            tier_role_ids={tier: role for tier, role in tier_role_ids.items() if role},
            min_account_age_days=float(config.get(config.MIN_ACCOUNT_AGE_DAYS) or 0),
            min_stay_hours=float(config.get(config.MIN_STAY_HOURS) or 0),
        )

    def role_for(self, tier: Tier) -> Optional[str]:
        return self.tier_role_ids.get(tier)
