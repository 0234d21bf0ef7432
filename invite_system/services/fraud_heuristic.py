"""
Heuristic anti-fraud check for arriving members.

Not a guarantee, it only reduces obvious fake accounts:
- bots never count
- accounts younger than the configured minimum age never count
- generated-looking usernames count only if the account has a custom avatar
"""
import re
from datetime import datetime
from typing import Optional

from invite_system.ports import MemberProfile
from models.base import as_utc, utc_now

SUSPICIOUS_USERNAME_PATTERNS = [
    re.compile(r"user\d{4,}", re.IGNORECASE),     # user12345
    re.compile(r"discord\d{4,}", re.IGNORECASE),  # discord1234
    re.compile(r"guest\d{3,}", re.IGNORECASE),    # guest123
    re.compile(r"novo\d{3,}", re.IGNORECASE),     # novo123
]

SECONDS_PER_DAY = 86400


def is_suspicious_username(username: Optional[str]) -> bool:
    name = username or ""
    return any(pattern.fullmatch(name) for pattern in SUSPICIOUS_USERNAME_PATTERNS)


def account_age_days(member: MemberProfile, now: Optional[datetime] = None) -> float:
    now = as_utc(now) if now is not None else utc_now()
    return (now - as_utc(member.account_created_at)).total_seconds() / SECONDS_PER_DAY


def is_real(member: MemberProfile, min_account_age_days: float = 0, now: Optional[datetime] = None) -> bool:
    """
    Classify an arriving member as plausibly real.

    Args:
        member: Member attributes
        min_account_age_days: Minimum account age, 0 disables the check
        now: Reference time (defaults to current UTC time)

    Returns:
        True if the arrival should be credited to the inviter
    """
    if member.is_bot:
        return False

    if min_account_age_days and min_account_age_days > 0:
        if account_age_days(member, now) < min_account_age_days:
            return False

    # Avatar presence overrides a suspicious name
    if is_suspicious_username(member.username) and not member.has_custom_avatar:
        return False

    return True
