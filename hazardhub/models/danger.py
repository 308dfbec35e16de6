"""
Derived danger models. Nothing here is stored on the alert collection;
everything is recomputed from the active alerts of a spot.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict
from enum import Enum

from hazardhub.models.alert import Alert, Reason, Severity


class DangerLevel(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"
    DANGEROUS = "dangerous"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)


_LEVEL_ORDER = [
    DangerLevel.SAFE,
    DangerLevel.CAUTION,
    DangerLevel.WARNING,
    DangerLevel.DANGEROUS,
    DangerLevel.CRITICAL,
]


class DangerAssessment(BaseModel):
    """Danger level of one spot with the facts it was derived from."""
    spot_id: str
    level: DangerLevel = DangerLevel.SAFE
    severity: Optional[Severity] = None
    reasons: List[Reason] = Field(default_factory=list)
    alert_count: int = 0
    has_confirmed: bool = False


class SpotDangerSummary(BaseModel):
    """One entry of the dangerous-spots listing."""
    spot_id: str
    alerts: List[Alert] = Field(default_factory=list)
    reasons: List[Reason] = Field(default_factory=list)
    highest_severity: Severity
    report_count: int = 0
    confirmation_count: int = 0
    latest_report: Optional[datetime] = None


class DangerStats(BaseModel):
    """Aggregate counters over every alert and proposal."""
    total_alerts: int = 0
    pending_alerts: int = 0
    confirmed_alerts: int = 0
    dismissed_alerts: int = 0
    resolved_alerts: int = 0
    deletion_proposals: int = 0
    pending_deletions: int = 0
    approved_deletions: int = 0
    by_reason: Dict[str, int] = Field(default_factory=dict)
    by_severity: Dict[str, int] = Field(default_factory=dict)
