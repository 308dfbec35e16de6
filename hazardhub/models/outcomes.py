"""
Payloads carried by successful command results.
"""

from pydantic import BaseModel
from typing import Optional

from hazardhub.models.alert import Alert
from hazardhub.models.proposal import DeletionProposal


class ConfirmationOutcome(BaseModel):
    alert: Alert
    total_confirmations: int
    deletion_threshold_reached: bool = False
    proposal: Optional[DeletionProposal] = None  # Set when this confirmation opened (or found) a proposal


class VoteOutcome(BaseModel):
    proposal: DeletionProposal
    resolved: bool = False  # True only on the vote that closed the proposal


class ReportOutcome(BaseModel):
    alert: Alert
    promoted: Optional[Alert] = None  # Alert auto-confirmed by this report, if any
    deletion_threshold_reached: bool = False
