# invite_system/__init__.py
"""
Invite System - personal invite attribution, real-join ledger and tiers.
"""

# Facade
from invite_system.tracker import InviteTracker
from invite_system.settings import TrackerSettings

# Events and results
from invite_system.events.event_types import MemberArrived, MemberDeparted, InspectionRequested
from invite_system.results import OperationResult, OperationStatus
from invite_system.exceptions import TrackingUnavailable, InviteUnavailable

# Models and configuration
from invite_system.config.ranks import Tier, TIER_THRESHOLDS
from invite_system.ports import MemberProfile, CreatedInvite

__all__ = [
    # Facade
    'InviteTracker',
    'TrackerSettings',

    # Events
    'MemberArrived',
    'MemberDeparted',
    'InspectionRequested',

    # Results
    'OperationResult',
    'OperationStatus',
    'TrackingUnavailable',
    'InviteUnavailable',

    # Config
    'Tier',
    'TIER_THRESHOLDS',
    'MemberProfile',
    'CreatedInvite',
]
