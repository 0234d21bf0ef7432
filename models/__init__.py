"""
Database models for Ghost invite tracker.
Import all models here so Base.metadata knows every table.
"""

# Base
from models.base import Base

# Core models
from models.personal_invite import PersonalInvite
from models.join_record import JoinRecord
from models.inviter_stats import InviterStats
from models.setting import Setting

__all__ = [
    # Base
    'Base',

    # Core
    'PersonalInvite',
    'JoinRecord',
    'InviterStats',
    'Setting',
]
