"""
Confirmation Engine - alert reporting, confirmation and moderation transitions.

DESIGN PRINCIPLES:
- One active report per (spot, reporter, reason)
- A reporter never confirms their own alert
- The reporter counts as the first confirmer for threshold purposes
- Enough independent reporters of the same reason act as a confirmation
- No storage of derived danger levels here; the orchestrator reclassifies
"""

from datetime import datetime
from typing import Callable, List, Optional, Union
import logging

from hazardhub.models.alert import Alert, AlertStatus, Reason, parse_reason
from hazardhub.models.outcomes import ConfirmationOutcome, ReportOutcome
from hazardhub.models.result import CommandResult, ErrorCode
from hazardhub.services.alert_store import AlertStore
from hazardhub.utils.clock import utcnow
from hazardhub.utils.ids import generate_alert_id

logger = logging.getLogger(__name__)


class ConfirmationEngine:
    """
    Applies reports and confirmations to alerts.

    Thresholds:
    - confirm_threshold: total confirmations (reporter included) that turn an alert CONFIRMED
    - delete_threshold: total confirmations that ask the orchestrator for a deletion proposal
    """

    def __init__(
        self,
        alerts: AlertStore,
        confirm_threshold: int = 3,
        delete_threshold: int = 5,
        details_max_length: int = 500,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.alerts = alerts
        self.confirm_threshold = confirm_threshold
        self.delete_threshold = delete_threshold
        self.details_max_length = details_max_length
        self.clock = clock

    def report(
        self,
        spot_id: Optional[str],
        reporter_id: str,
        reason: Union[Reason, str, None],
        details: Optional[str] = "",
    ) -> CommandResult:
        """
        Create a PENDING alert. Returns a ReportOutcome.

        Side effect: once the spot holds CONFIRM_THRESHOLD active alerts for
        the reported reason, its most severe PENDING alert is promoted to
        CONFIRMED. The outcome flags when that promotion reaches
        delete_threshold so the orchestrator can open a proposal.
        """
        if not spot_id or not spot_id.strip():
            return CommandResult.fail(ErrorCode.MISSING_SPOT_ID)
        if not reason:
            return CommandResult.fail(ErrorCode.MISSING_REASON)

        parsed = parse_reason(reason)
        if parsed is None:
            return CommandResult.fail(ErrorCode.INVALID_REASON, f"Unknown reason '{reason}'")

        spot_alerts = self.alerts.list_for_spot(spot_id)
        duplicate = next(
            (
                a for a in spot_alerts
                if a.reporter_id == reporter_id
                and a.reason == parsed
                and a.status != AlertStatus.DISMISSED
            ),
            None,
        )
        if duplicate:
            logger.info(f"Duplicate report by {reporter_id} on spot {spot_id} ({parsed.value}), matches {duplicate.id}")
            return CommandResult.fail(
                ErrorCode.DUPLICATE_REPORT,
                f"You already reported {parsed.value} for this spot",
            )

        now = self.clock()
        alert = self.alerts.create(Alert(
            id=generate_alert_id(),
            spot_id=spot_id,
            reason=parsed,
            severity=parsed.severity,
            details=(details or "").strip()[:self.details_max_length],
            reporter_id=reporter_id,
            status=AlertStatus.PENDING,
            confirmations=[],
            created_at=now,
            updated_at=now,
        ))
        logger.info(f"Alert {alert.id} reported on spot {spot_id}: {parsed.value} ({parsed.severity.value})")

        promoted = self._promote_if_corroborated(spot_alerts + [alert], parsed)
        if promoted is not None and promoted.id == alert.id:
            alert = promoted

        return CommandResult.ok(ReportOutcome(
            alert=alert,
            promoted=promoted,
            deletion_threshold_reached=(
                promoted is not None and promoted.total_confirmations >= self.delete_threshold
            ),
        ))

    def _promote_if_corroborated(self, spot_alerts: List[Alert], reason: Reason) -> Optional[Alert]:
        same_reason = [a for a in spot_alerts if a.is_active and a.reason == reason]
        if len(same_reason) < self.confirm_threshold:
            return None

        pending = [a for a in spot_alerts if a.status == AlertStatus.PENDING]
        if not pending:
            return None
        # min() keeps the first of equal ranks, and spot_alerts is oldest first
        target = min(pending, key=lambda a: a.severity.rank)

        active = [a for a in spot_alerts if a.is_active]
        confirmations = list(target.confirmations)
        for other in active:
            if (
                other.id != target.id
                and other.reason == target.reason
                and other.reporter_id != target.reporter_id
                and other.reporter_id not in confirmations
            ):
                confirmations.append(other.reporter_id)

        promoted = self.alerts.save(target.model_copy(update={
            "status": AlertStatus.CONFIRMED,
            "confirmations": confirmations,
            "updated_at": self.clock(),
        }))
        logger.info(
            f"Alert {promoted.id} auto-confirmed on spot {promoted.spot_id}: "
            f"{len(same_reason)} independent {reason.value} reports"
        )
        return promoted

    def confirm(
        self,
        spot_id: Optional[str],
        alert_id: Optional[str],
        confirmer_id: str,
    ) -> CommandResult:
        """
        Add a confirmation to an alert.

        Without alert_id the most recently created PENDING alert of the spot
        is the target.
        """
        if not spot_id or not spot_id.strip():
            return CommandResult.fail(ErrorCode.MISSING_SPOT_ID)

        alert = self._resolve_target(spot_id, alert_id)
        if alert is None:
            return CommandResult.fail(ErrorCode.ALERT_NOT_FOUND)
        if not alert.is_active:
            return CommandResult.fail(ErrorCode.ALERT_CLOSED, f"Alert {alert.id} is {alert.status.value}")
        if confirmer_id == alert.reporter_id:
            return CommandResult.fail(ErrorCode.CANNOT_CONFIRM_OWN_REPORT, "You cannot confirm your own report")
        if confirmer_id in alert.confirmations:
            return CommandResult.fail(ErrorCode.ALREADY_CONFIRMED, "You already confirmed this danger")

        confirmations = alert.confirmations + [confirmer_id]
        total = len(confirmations) + 1
        update = {"confirmations": confirmations, "updated_at": self.clock()}
        if total >= self.confirm_threshold:
            update["status"] = AlertStatus.CONFIRMED

        saved = self.alerts.save(alert.model_copy(update=update))
        logger.info(f"Alert {saved.id} confirmed by {confirmer_id}: {total} total, status {saved.status.value}")

        return CommandResult.ok(ConfirmationOutcome(
            alert=saved,
            total_confirmations=total,
            deletion_threshold_reached=total >= self.delete_threshold,
        ))

    def _resolve_target(self, spot_id: str, alert_id: Optional[str]) -> Optional[Alert]:
        if alert_id:
            alert = self.alerts.get(alert_id)
            if alert is None or alert.spot_id != spot_id:
                return None
            return alert

        pending = [a for a in self.alerts.list_for_spot(spot_id) if a.status == AlertStatus.PENDING]
        # list_for_spot is oldest first; the last entry is the latest
        return pending[-1] if pending else None

    def dismiss(self, alert_id: Optional[str], reason: Optional[str] = "") -> CommandResult:
        """Moderator action: the alert stops counting everywhere."""
        return self._close(alert_id, AlertStatus.DISMISSED, {"dismissal_reason": reason or ""})

    def resolve(self, alert_id: Optional[str], resolution: Optional[str] = "") -> CommandResult:
        """Moderator action: the danger has been addressed."""
        return self._close(alert_id, AlertStatus.RESOLVED, {"resolution": resolution or ""})

    def _close(self, alert_id: Optional[str], status: AlertStatus, extra: dict) -> CommandResult:
        if not alert_id:
            return CommandResult.fail(ErrorCode.MISSING_ALERT_ID)

        alert = self.alerts.get(alert_id)
        if alert is None:
            return CommandResult.fail(ErrorCode.ALERT_NOT_FOUND)
        # DISMISSED and RESOLVED are terminal
        if not alert.is_active:
            return CommandResult.fail(ErrorCode.ALERT_CLOSED, f"Alert {alert.id} is already {alert.status.value}")

        saved = self.alerts.save(alert.model_copy(update={
            "status": status,
            "updated_at": self.clock(),
            **extra,
        }))
        logger.info(f"Alert {saved.id} on spot {saved.spot_id}: {alert.status.value} → {status.value}")
        return CommandResult.ok(saved)
