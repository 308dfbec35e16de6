"""Danger level rules over a spot's alerts."""
from datetime import datetime, timedelta, timezone

from hazardhub.models.alert import Alert, AlertStatus, Reason, Severity
from hazardhub.models.danger import DangerLevel
from hazardhub.services import danger_classifier

BASE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_alert(n, reason=Reason.THEFT, status=AlertStatus.PENDING, spot_id="s1", reporter=None, confirmations=None):
    created = BASE + timedelta(minutes=n)
    return Alert(
        id=f"danger_{n}",
        spot_id=spot_id,
        reason=reason,
        severity=reason.severity,
        reporter_id=reporter or f"user{n}",
        status=status,
        confirmations=confirmations or [],
        created_at=created,
        updated_at=created,
    )


class TestClassify:

    def test_no_alerts_is_safe(self):
        assert danger_classifier.classify([]) == DangerLevel.SAFE

    def test_closed_alerts_do_not_count(self):
        alerts = [
            make_alert(1, status=AlertStatus.DISMISSED),
            make_alert(2, reason=Reason.ASSAULT, status=AlertStatus.RESOLVED),
        ]
        assert danger_classifier.classify(alerts) == DangerLevel.SAFE

    def test_single_pending_is_caution(self):
        assert danger_classifier.classify([make_alert(1)]) == DangerLevel.CAUTION

    def test_two_pending_is_warning(self):
        alerts = [make_alert(1), make_alert(2, reason=Reason.WILD_ANIMALS)]
        assert danger_classifier.classify(alerts) == DangerLevel.WARNING

    def test_confirmed_high_is_dangerous(self):
        assert danger_classifier.classify([make_alert(1, status=AlertStatus.CONFIRMED)]) == DangerLevel.DANGEROUS

    def test_confirmed_with_critical_anywhere_is_critical(self):
        # The confirmed alert is HIGH but a pending assault raises the worst severity
        alerts = [
            make_alert(1, status=AlertStatus.CONFIRMED),
            make_alert(2, reason=Reason.ASSAULT),
        ]
        assert danger_classifier.classify(alerts) == DangerLevel.CRITICAL

    def test_critical_pending_without_confirmation_is_only_warning(self):
        alerts = [make_alert(1, reason=Reason.ASSAULT), make_alert(2, reason=Reason.ASSAULT, reporter="other")]
        assert danger_classifier.classify(alerts) == DangerLevel.WARNING


class TestAssess:

    def test_assessment_lists_unique_reasons_in_order(self):
        alerts = [
            make_alert(1, reason=Reason.HOSTILE_POLICE),
            make_alert(2, reason=Reason.THEFT),
            make_alert(3, reason=Reason.HOSTILE_POLICE),
            make_alert(4, reason=Reason.ASSAULT, status=AlertStatus.DISMISSED),
        ]
        assessment = danger_classifier.assess("s1", alerts)

        assert assessment.reasons == [Reason.HOSTILE_POLICE, Reason.THEFT]
        assert assessment.alert_count == 3
        assert assessment.severity == Severity.HIGH
        assert assessment.level == DangerLevel.WARNING
        assert assessment.has_confirmed is False

    def test_empty_assessment(self):
        assessment = danger_classifier.assess("s1", [])
        assert assessment.level == DangerLevel.SAFE
        assert assessment.severity is None
        assert assessment.reasons == []


class TestSummarize:

    def test_groups_active_alerts_per_spot(self):
        alerts = [
            make_alert(1, spot_id="a"),
            make_alert(2, spot_id="a", reason=Reason.ASSAULT, confirmations=["x", "y"]),
            make_alert(3, spot_id="b", status=AlertStatus.DISMISSED),
            make_alert(4, spot_id="c", reason=Reason.WILD_ANIMALS),
        ]
        summaries = {s.spot_id: s for s in danger_classifier.summarize(alerts)}

        assert set(summaries) == {"a", "c"}
        assert summaries["a"].report_count == 2
        assert summaries["a"].highest_severity == Severity.CRITICAL
        assert summaries["a"].confirmation_count == 1 + 3
        assert summaries["a"].latest_report == BASE + timedelta(minutes=2)
        assert summaries["c"].reasons == [Reason.WILD_ANIMALS]


def test_severity_and_level_ordering():
    assert Severity.CRITICAL.rank < Severity.HIGH.rank < Severity.MEDIUM.rank
    ranks = [level.rank for level in DangerLevel]
    assert ranks == sorted(ranks)
    assert Reason.ASSAULT.severity == Severity.CRITICAL
    assert Reason.DANGEROUS_ROAD.severity == Severity.HIGH
