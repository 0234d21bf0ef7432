"""
Explicit outcome of a tracker operation.

Failures of external calls never propagate out of the pipeline; they come back
as FAILED results with a reason, skipped work as SKIPPED.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class OperationStatus(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationResult:
    status: OperationStatus
    reason: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def applied(cls, reason: str = "ok", **details) -> "OperationResult":
        return cls(OperationStatus.APPLIED, reason, details)

    @classmethod
    def skipped(cls, reason: str, **details) -> "OperationResult":
        return cls(OperationStatus.SKIPPED, reason, details)

    @classmethod
    def failed(cls, reason: str, **details) -> "OperationResult":
        return cls(OperationStatus.FAILED, reason, details)

    @property
    def is_applied(self) -> bool:
        return self.status is OperationStatus.APPLIED

    @property
    def is_skipped(self) -> bool:
        return self.status is OperationStatus.SKIPPED

    @property
    def is_failed(self) -> bool:
        return self.status is OperationStatus.FAILED
