"""
Tagged command results.

DESIGN PRINCIPLE:
- Expected business outcomes never raise; they come back as a failed result
- Callers (routes) decide user-visible messaging
- Only storage failures propagate as exceptions
"""

from pydantic import BaseModel
from typing import Any, Optional
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


class ErrorCode(str, Enum):
    # Validation
    MISSING_SPOT_ID = "missing_spot_id"
    MISSING_REASON = "missing_reason"
    INVALID_REASON = "invalid_reason"
    MISSING_ALERT_ID = "missing_alert_id"
    MISSING_PROPOSAL_ID = "missing_proposal_id"
    INVALID_VOTE = "invalid_vote"
    # Conflict
    DUPLICATE_REPORT = "duplicate_report"
    ALREADY_CONFIRMED = "already_confirmed"
    CANNOT_CONFIRM_OWN_REPORT = "cannot_confirm_own_report"
    ALREADY_PROPOSED = "already_proposed"
    PROPOSAL_CLOSED = "proposal_closed"
    ALERT_CLOSED = "alert_closed"
    PROPOSAL_NOT_APPROVED = "proposal_not_approved"
    # Not found
    ALERT_NOT_FOUND = "alert_not_found"
    PROPOSAL_NOT_FOUND = "proposal_not_found"

    @property
    def kind(self) -> ErrorKind:
        if self in (ErrorCode.ALERT_NOT_FOUND, ErrorCode.PROPOSAL_NOT_FOUND):
            return ErrorKind.NOT_FOUND
        if self.value.startswith(("missing_", "invalid_")):
            return ErrorKind.VALIDATION
        return ErrorKind.CONFLICT


class CommandResult(BaseModel):
    """
    Result of every public command.
    `value` carries the payload on success (and, for AlreadyProposed, the
    existing proposal).
    """
    success: bool = True
    value: Optional[Any] = None
    error: Optional[ErrorCode] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None, message: Optional[str] = None) -> "CommandResult":
        return cls(success=True, value=value, message=message)

    @classmethod
    def fail(cls, error: ErrorCode, message: Optional[str] = None, value: Any = None) -> "CommandResult":
        return cls(success=False, error=error, message=message or error.value.replace("_", " "), value=value)
