"""
Danger Classifier - maps a spot's active alerts to a danger level.

DESIGN PRINCIPLES:
- Pure functions, no storage access
- Only PENDING and CONFIRMED alerts count
- Re-run after every alert mutation; the result is published to the spot catalog

Rules:
1. No active alerts → SAFE
2. Any CONFIRMED alert → CRITICAL if the worst severity is CRITICAL, else DANGEROUS
3. Two or more pending alerts → WARNING
4. A single pending alert → CAUTION
"""

from typing import Dict, Iterable, List, Optional

from hazardhub.models.alert import Alert, AlertStatus, Reason, Severity
from hazardhub.models.danger import DangerAssessment, DangerLevel, SpotDangerSummary


def active_alerts(alerts: Iterable[Alert]) -> List[Alert]:
    return [a for a in alerts if a.is_active]


def highest_severity(alerts: Iterable[Alert]) -> Optional[Severity]:
    severities = [a.severity for a in alerts]
    if not severities:
        return None
    return min(severities, key=lambda s: s.rank)


def unique_reasons(alerts: Iterable[Alert]) -> List[Reason]:
    seen: List[Reason] = []
    for alert in alerts:
        if alert.reason not in seen:
            seen.append(alert.reason)
    return seen


def classify(alerts: Iterable[Alert]) -> DangerLevel:
    active = active_alerts(alerts)
    if not active:
        return DangerLevel.SAFE

    if any(a.status == AlertStatus.CONFIRMED for a in active):
        if highest_severity(active) == Severity.CRITICAL:
            return DangerLevel.CRITICAL
        return DangerLevel.DANGEROUS

    if len(active) >= 2:
        return DangerLevel.WARNING
    return DangerLevel.CAUTION


def assess(spot_id: str, alerts: Iterable[Alert]) -> DangerAssessment:
    active = active_alerts(alerts)
    return DangerAssessment(
        spot_id=spot_id,
        level=classify(active),
        severity=highest_severity(active),
        reasons=unique_reasons(active),
        alert_count=len(active),
        has_confirmed=any(a.status == AlertStatus.CONFIRMED for a in active),
    )


def summarize(alerts: Iterable[Alert]) -> List[SpotDangerSummary]:
    """Group active alerts by spot, one summary per spot with at least one active alert."""
    grouped: Dict[str, List[Alert]] = {}
    for alert in active_alerts(alerts):
        grouped.setdefault(alert.spot_id, []).append(alert)

    summaries = []
    for spot_id, spot_alerts in grouped.items():
        summaries.append(SpotDangerSummary(
            spot_id=spot_id,
            alerts=spot_alerts,
            reasons=unique_reasons(spot_alerts),
            highest_severity=highest_severity(spot_alerts),
            report_count=len(spot_alerts),
            confirmation_count=sum(a.total_confirmations for a in spot_alerts),
            latest_report=max(a.created_at for a in spot_alerts),
        ))
    return summaries
