"""
Models.

In-memory data model of the password recovery flow.
"""

from app.models.enums import (
    FlowEvent,
    RecoveryActionKind,
    RecoveryField,
    RecoveryStep,
    StepOutcome,
    ValidationState,
)
from app.models.recovery_session import (
    FieldValidation,
    Notice,
    RecoverySession,
    RetryInfo,
)

__all__ = [
    "FieldValidation",
    "FlowEvent",
    "Notice",
    "RecoveryActionKind",
    "RecoveryField",
    "RecoverySession",
    "RecoveryStep",
    "RetryInfo",
    "StepOutcome",
    "ValidationState",
]
