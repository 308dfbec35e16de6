"""
Hazard Service - command surface of the hazard subsystem.

Wires the stores and engines together:
- report/confirm/dismiss/resolve → reclassify → publish danger level to the spot catalog
- confirm crossing DELETE_THRESHOLD → open a deletion proposal (idempotent)
- vote resolving APPROVED → flag the spot for deletion in the catalog

DESIGN PRINCIPLES:
- Every command returns a CommandResult; business failures never raise
- Commands on one spot are serialized by a per-spot lock
- Single-write commands are retried after a compare-and-swap conflict
- Storage failures propagate
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional
import logging

from hazardhub.core.settings import Settings, settings
from hazardhub.models.alert import REASON_CATALOG, Alert, AlertStatus, ReasonInfo, Severity
from hazardhub.models.danger import DangerAssessment, DangerStats, SpotDangerSummary
from hazardhub.models.proposal import DeletionProposal, ProposalStatus
from hazardhub.models.result import CommandResult, ErrorCode
from hazardhub.services import danger_classifier
from hazardhub.services.alert_store import AlertStore
from hazardhub.services.confirmation_engine import ConfirmationEngine
from hazardhub.services.notifier import LoggingNotifier, Notifier
from hazardhub.services.proposal_store import ProposalStore
from hazardhub.services.spot_catalog import SpotCatalog, StoreSpotCatalog
from hazardhub.services.spot_locks import SpotLockRegistry
from hazardhub.services.voting_engine import VotingEngine
from hazardhub.storage.base import KeyValueStore, StaleRecordError
from hazardhub.utils.clock import utcnow

logger = logging.getLogger(__name__)


class HazardService:

    def __init__(
        self,
        store: KeyValueStore,
        catalog: Optional[SpotCatalog] = None,
        notifier: Optional[Notifier] = None,
        config: Settings = settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.alerts = AlertStore(store, config.ALERTS_COLLECTION)
        self.proposals = ProposalStore(store, config.PROPOSALS_COLLECTION)
        self.catalog = catalog or StoreSpotCatalog(store, config.SPOTS_COLLECTION)
        self.notifier = notifier or LoggingNotifier()
        self.confirmations = ConfirmationEngine(
            self.alerts,
            confirm_threshold=config.CONFIRM_THRESHOLD,
            delete_threshold=config.DELETE_THRESHOLD,
            details_max_length=config.DETAILS_MAX_LENGTH,
            clock=clock,
        )
        self.voting = VotingEngine(self.proposals, quorum=config.VOTE_QUORUM, clock=clock)
        self.locks = SpotLockRegistry()
        self.retry_limit = config.WRITE_RETRY_LIMIT

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def report_alert(
        self,
        spot_id: Optional[str],
        reporter_id: str,
        reason: Optional[str],
        details: Optional[str] = "",
    ) -> CommandResult:
        """
        ReportAlert. The result value is the new Alert.

        Not retried: the alert may already be stored when a later write conflicts.
        """
        if not spot_id or not spot_id.strip():
            return self.confirmations.report(spot_id, reporter_id, reason, details)

        with self.locks.hold(spot_id):
            before = self._assess(spot_id)
            result = self.confirmations.report(spot_id, reporter_id, reason, details)
            if not result.success:
                return result

            outcome = result.value
            alert: Alert = outcome.alert
            assessment = self._publish(spot_id, before)
            self.notifier.notify("alert_reported", {
                "spot_id": spot_id,
                "alert_id": alert.id,
                "reason": alert.reason.value,
                "danger_level": assessment.level.value,
            })

            promoted: Optional[Alert] = outcome.promoted
            if promoted is not None:
                self.notifier.notify("alert_confirmed", {
                    "spot_id": spot_id,
                    "alert_id": promoted.id,
                    "total_confirmations": promoted.total_confirmations,
                    "status": promoted.status.value,
                })
            if outcome.deletion_threshold_reached:
                proposed = self.voting.propose(spot_id, promoted.id, reporter_id, assessment)
                if proposed.success:
                    self.notifier.notify("deletion_proposed", {
                        "spot_id": spot_id,
                        "proposal_id": proposed.value.id,
                        "triggering_alert_id": promoted.id,
                    })
            return CommandResult.ok(alert)

    def confirm_alert(
        self,
        spot_id: Optional[str],
        confirmer_id: str,
        alert_id: Optional[str] = None,
    ) -> CommandResult:
        """ConfirmAlert. Without alert_id the latest pending alert of the spot is confirmed."""
        if not spot_id or not spot_id.strip():
            return self.confirmations.confirm(spot_id, alert_id, confirmer_id)

        with self.locks.hold(spot_id):
            return self._with_retry(lambda: self._confirm_locked(spot_id, confirmer_id, alert_id))

    def _confirm_locked(self, spot_id: str, confirmer_id: str, alert_id: Optional[str]) -> CommandResult:
        before = self._assess(spot_id)
        result = self.confirmations.confirm(spot_id, alert_id, confirmer_id)
        if not result.success:
            return result

        outcome = result.value
        assessment = self._publish(spot_id, before)
        self.notifier.notify("alert_confirmed", {
            "spot_id": spot_id,
            "alert_id": outcome.alert.id,
            "total_confirmations": outcome.total_confirmations,
            "status": outcome.alert.status.value,
        })

        if outcome.deletion_threshold_reached:
            proposed = self.voting.propose(spot_id, outcome.alert.id, confirmer_id, assessment)
            # ALREADY_PROPOSED is the idempotent no-op; it still carries the open proposal
            outcome.proposal = proposed.value
            if proposed.success:
                self.notifier.notify("deletion_proposed", {
                    "spot_id": spot_id,
                    "proposal_id": proposed.value.id,
                    "triggering_alert_id": outcome.alert.id,
                })
        return result

    def dismiss_alert(self, alert_id: Optional[str], reason: Optional[str] = "") -> CommandResult:
        """DismissAlert (moderator)."""
        return self._close_alert(alert_id, lambda: self.confirmations.dismiss(alert_id, reason), "alert_dismissed")

    def resolve_alert(self, alert_id: Optional[str], resolution: Optional[str] = "") -> CommandResult:
        """ResolveAlert (moderator): the danger has been addressed."""
        return self._close_alert(alert_id, lambda: self.confirmations.resolve(alert_id, resolution), "alert_resolved")

    def _close_alert(self, alert_id: Optional[str], transition: Callable[[], CommandResult], event: str) -> CommandResult:
        alert = self.alerts.get(alert_id) if alert_id else None
        if alert is None:
            # Let the engine produce MISSING_ALERT_ID / ALERT_NOT_FOUND
            return transition()

        with self.locks.hold(alert.spot_id):
            before = self._assess(alert.spot_id)
            result = self._with_retry(transition)
            if result.success:
                assessment = self._publish(alert.spot_id, before)
                self.notifier.notify(event, {
                    "spot_id": alert.spot_id,
                    "alert_id": alert.id,
                    "danger_level": assessment.level.value,
                })
            return result

    def propose_deletion(
        self,
        spot_id: Optional[str],
        proposed_by: str,
        alert_id: Optional[str] = None,
    ) -> CommandResult:
        """ProposeDeletion. Usually opened by confirm_alert; also callable directly."""
        if not spot_id or not spot_id.strip():
            return CommandResult.fail(ErrorCode.MISSING_SPOT_ID)

        with self.locks.hold(spot_id):
            if alert_id:
                alert = self.alerts.get(alert_id)
                if alert is None or alert.spot_id != spot_id:
                    return CommandResult.fail(ErrorCode.ALERT_NOT_FOUND)

            result = self.voting.propose(spot_id, alert_id, proposed_by, self._assess(spot_id))
            if result.success:
                self.notifier.notify("deletion_proposed", {
                    "spot_id": spot_id,
                    "proposal_id": result.value.id,
                    "triggering_alert_id": alert_id,
                })
            return result

    def vote_on_proposal(self, proposal_id: Optional[str], voter_id: str, choice: Optional[str]) -> CommandResult:
        """VoteOnProposal."""
        proposal = self.proposals.get(proposal_id) if proposal_id else None
        if proposal is None:
            # Let the engine produce the validation / not-found error
            return self.voting.vote(proposal_id, voter_id, choice)

        with self.locks.hold(proposal.spot_id):
            result = self._with_retry(lambda: self.voting.vote(proposal_id, voter_id, choice))
            if result.success and result.value.resolved:
                resolved: DeletionProposal = result.value.proposal
                self.notifier.notify("proposal_resolved", {
                    "spot_id": resolved.spot_id,
                    "proposal_id": resolved.id,
                    "status": resolved.status.value,
                    "approve": len(resolved.votes.approve),
                    "reject": len(resolved.votes.reject),
                })
                if resolved.status == ProposalStatus.APPROVED:
                    self.catalog.flag_for_deletion(resolved.spot_id, resolved.id)
            return result

    def mark_spot_deleted(self, proposal_id: Optional[str]) -> CommandResult:
        """The catalog physically removed the spot of an approved proposal."""
        proposal = self.proposals.get(proposal_id) if proposal_id else None
        if proposal is None:
            return self.voting.mark_deleted(proposal_id)

        with self.locks.hold(proposal.spot_id):
            result = self._with_retry(lambda: self.voting.mark_deleted(proposal_id))
            if result.success:
                self.notifier.notify("spot_deleted", {"spot_id": proposal.spot_id, "proposal_id": proposal.id})
            return result

    def refresh_danger_level(self, spot_id: Optional[str]) -> CommandResult:
        """Recompute and republish a spot's danger level (for writers outside this subsystem)."""
        if not spot_id or not spot_id.strip():
            return CommandResult.fail(ErrorCode.MISSING_SPOT_ID)
        with self.locks.hold(spot_id):
            return CommandResult.ok(self._publish(spot_id))

    def clear_all_danger_data(self) -> CommandResult:
        """Delete every alert and proposal, then republish the affected spots as SAFE."""
        spot_ids = {a.spot_id for a in self.alerts.list_all()}
        alerts_deleted = self.alerts.delete_all()
        proposals_deleted = self.proposals.delete_all()
        for spot_id in spot_ids:
            self._publish(spot_id)

        logger.warning(f"Cleared danger data: {alerts_deleted} alerts, {proposals_deleted} proposals")
        self.notifier.notify("danger_data_cleared", {
            "alerts_deleted": alerts_deleted,
            "proposals_deleted": proposals_deleted,
        })
        return CommandResult.ok({"alerts_deleted": alerts_deleted, "proposals_deleted": proposals_deleted})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        return self.alerts.get(alert_id) if alert_id else None

    def get_spot_alerts(self, spot_id: str) -> List[Alert]:
        return self.alerts.list_for_spot(spot_id) if spot_id else []

    def get_spot_danger_level(self, spot_id: str) -> DangerAssessment:
        if not spot_id:
            return DangerAssessment(spot_id="")
        return self._assess(spot_id)

    def is_spot_dangerous(self, spot_id: str) -> bool:
        return any(a.status == AlertStatus.CONFIRMED for a in self.get_spot_alerts(spot_id))

    def get_dangerous_spots(self) -> List[SpotDangerSummary]:
        return danger_classifier.summarize(self.alerts.list_all())

    def get_proposal(self, proposal_id: str) -> Optional[DeletionProposal]:
        return self.proposals.get(proposal_id) if proposal_id else None

    def get_deletion_proposal(self, spot_id: str) -> Optional[DeletionProposal]:
        return self.proposals.get_active_for_spot(spot_id) if spot_id else None

    def get_pending_deletion_proposals(self) -> List[DeletionProposal]:
        return self.proposals.list_pending()

    def get_danger_reasons(self) -> List[ReasonInfo]:
        return list(REASON_CATALOG.values())

    def get_danger_stats(self) -> DangerStats:
        alerts = self.alerts.list_all()
        proposals = self.proposals.list_all()

        def count_status(status: AlertStatus) -> int:
            return sum(1 for a in alerts if a.status == status)

        by_reason: Dict[str, int] = {}
        for alert in alerts:
            by_reason[alert.reason.value] = by_reason.get(alert.reason.value, 0) + 1

        return DangerStats(
            total_alerts=len(alerts),
            pending_alerts=count_status(AlertStatus.PENDING),
            confirmed_alerts=count_status(AlertStatus.CONFIRMED),
            dismissed_alerts=count_status(AlertStatus.DISMISSED),
            resolved_alerts=count_status(AlertStatus.RESOLVED),
            deletion_proposals=len(proposals),
            pending_deletions=sum(1 for p in proposals if p.status == ProposalStatus.PROPOSED),
            approved_deletions=sum(1 for p in proposals if p.status == ProposalStatus.APPROVED),
            by_reason=by_reason,
            by_severity={s.value: sum(1 for a in alerts if a.severity == s) for s in Severity},
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _assess(self, spot_id: str) -> DangerAssessment:
        return danger_classifier.assess(spot_id, self.alerts.list_for_spot(spot_id))

    def _publish(self, spot_id: str, before: Optional[DangerAssessment] = None) -> DangerAssessment:
        assessment = self._assess(spot_id)
        self.catalog.set_danger_level(spot_id, assessment.level, assessment.reasons)
        if before is not None and before.level != assessment.level:
            self.notifier.notify("danger_level_changed", {
                "spot_id": spot_id,
                "from": before.level.value,
                "to": assessment.level.value,
            })
        return assessment

    def _with_retry(self, operation: Callable[[], CommandResult]) -> CommandResult:
        attempt = 0
        while True:
            try:
                return operation()
            except StaleRecordError as e:
                attempt += 1
                if attempt > self.retry_limit:
                    logger.error(f"Giving up after {attempt} conflicting writes: {e}")
                    raise
                logger.warning(f"Write conflict, retrying ({attempt}/{self.retry_limit}): {e}")


# Global service instance (singleton pattern)
_hazard_service: Optional[HazardService] = None


def get_hazard_service() -> HazardService:
    """
    Get or create HazardService singleton instance.

    Returns:
        HazardService: The global hazard service bound to the configured store
    """
    global _hazard_service
    if _hazard_service is None:
        from hazardhub.storage.registry import get_store
        _hazard_service = HazardService(get_store())
    return _hazard_service
