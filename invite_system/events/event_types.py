"""
Inbound events driving the invite tracker.

The platform adapter translates gateway callbacks into these values; tests
feed them directly.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class MemberArrived:
    member_id: str
    community_id: str
    arrived_at: datetime


@dataclass(frozen=True)
class MemberDeparted:
    member_id: str
    departed_at: datetime


@dataclass(frozen=True)
class InspectionRequested:
    user_id: str


TrackerEvent = Union[MemberArrived, MemberDeparted, InspectionRequested]
