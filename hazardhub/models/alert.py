"""
Pydantic models for hazard alerts.
These models describe the stored alert record and the report/confirm requests.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict
from enum import Enum


class Severity(str, Enum):
    """Fixed severity carried by every reason. Lower rank = more severe."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: Dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
}


class Reason(str, Enum):
    """Why a spot is considered unsafe."""
    THEFT = "theft"
    ASSAULT = "assault"
    HOSTILE_POLICE = "hostile_police"
    DANGEROUS_ROAD = "dangerous_road"
    WILD_ANIMALS = "wild_animals"

    @property
    def severity(self) -> Severity:
        return REASON_CATALOG[self].severity


class ReasonInfo(BaseModel):
    """Public description of a reason (served by GET /alerts/reasons)."""
    id: Reason
    label: str
    description: str
    severity: Severity


REASON_CATALOG: Dict[Reason, ReasonInfo] = {
    Reason.THEFT: ReasonInfo(
        id=Reason.THEFT,
        label="Theft",
        description="Frequent thefts, pickpockets, mugging",
        severity=Severity.HIGH,
    ),
    Reason.ASSAULT: ReasonInfo(
        id=Reason.ASSAULT,
        label="Assault",
        description="Physical or verbal assaults reported",
        severity=Severity.CRITICAL,
    ),
    Reason.HOSTILE_POLICE: ReasonInfo(
        id=Reason.HOSTILE_POLICE,
        label="Hostile Police",
        description="Law enforcement hostile to hitchhikers",
        severity=Severity.MEDIUM,
    ),
    Reason.DANGEROUS_ROAD: ReasonInfo(
        id=Reason.DANGEROUS_ROAD,
        label="Dangerous Road",
        description="Heavy traffic, poor visibility, no shoulder",
        severity=Severity.HIGH,
    ),
    Reason.WILD_ANIMALS: ReasonInfo(
        id=Reason.WILD_ANIMALS,
        label="Wild Animals",
        description="Presence of dangerous wild animals (bears, wolves, boars)",
        severity=Severity.MEDIUM,
    ),
}


def parse_reason(value: Optional[str]) -> Optional[Reason]:
    """Return the Reason for a wire id, or None when unknown."""
    try:
        return Reason(value)
    except ValueError:
        return None


class AlertStatus(str, Enum):
    """
    Alert lifecycle.

    PENDING → CONFIRMED happens automatically; DISMISSED and RESOLVED are
    moderator actions. Only PENDING and CONFIRMED alerts are active.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DISMISSED = "dismissed"
    RESOLVED = "resolved"

    @property
    def is_active(self) -> bool:
        return self in (AlertStatus.PENDING, AlertStatus.CONFIRMED)


class Alert(BaseModel):
    """Stored hazard alert."""
    id: str = Field(..., description="Alert ID (danger_<ms>_<suffix>)")
    spot_id: str
    reason: Reason
    severity: Severity
    details: str = ""
    reporter_id: str
    status: AlertStatus = AlertStatus.PENDING
    confirmations: List[str] = Field(default_factory=list, description="Confirmer ids, reporter excluded")
    dismissal_reason: Optional[str] = None
    resolution: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    version: int = Field(default=1, ge=1, description="Optimistic concurrency counter")

    @property
    def total_confirmations(self) -> int:
        # The reporter counts as the first confirmer
        return len(self.confirmations) + 1

    @property
    def is_active(self) -> bool:
        return self.status.is_active


class ReportAlertRequest(BaseModel):
    """Incoming POST /alerts body. Reason stays a plain string so unknown ids reach the service."""
    spot_id: str = Field(..., max_length=200)
    reason: str = Field(..., max_length=50)
    details: str = Field(default="", description="Free text, truncated to DETAILS_MAX_LENGTH")

    class Config:
        json_schema_extra = {
            "example": {
                "spot_id": "spot_lyon_a7_south",
                "reason": "theft",
                "details": "Bags snatched from drivers stopped at the ramp.",
            }
        }


class ConfirmAlertRequest(BaseModel):
    """Incoming POST /alerts/confirm body. Without alert_id the latest pending alert is confirmed."""
    spot_id: str = Field(..., max_length=200)
    alert_id: Optional[str] = None


class ModerationRequest(BaseModel):
    """Body for dismiss/resolve admin actions."""
    note: str = Field(default="", max_length=500)
