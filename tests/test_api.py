"""HTTP surface through FastAPI's TestClient."""


def headers(user):
    return {"X-User-ID": user}


def report(client, user, spot_id="S1", reason="theft", details=""):
    return client.post("/alerts", json={"spot_id": spot_id, "reason": reason, "details": details}, headers=headers(user))


class TestAlertRoutes:

    def test_report_returns_created_alert(self, client):
        resp = report(client, "alice", details="pickpockets")
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "pending"
        assert body["severity"] == "high"
        assert body["reporter_id"] == "alice"

    def test_missing_identity_is_rejected(self, client):
        resp = client.post("/alerts", json={"spot_id": "S1", "reason": "theft"})
        assert resp.status_code == 422

    def test_business_errors_map_to_status_codes(self, client):
        assert report(client, "alice", reason="earthquake").status_code == 400

        alert_id = report(client, "alice").json()["id"]
        duplicate = report(client, "alice")
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"]["error"] == "duplicate_report"

        own = client.post("/alerts/confirm", json={"spot_id": "S1", "alert_id": alert_id}, headers=headers("alice"))
        assert own.status_code == 409
        assert own.json()["detail"]["error"] == "cannot_confirm_own_report"

        missing = client.post("/alerts/confirm", json={"spot_id": "S9"}, headers=headers("bob"))
        assert missing.status_code == 404

    def test_confirm_and_read_danger(self, client):
        alert_id = report(client, "alice").json()["id"]
        resp = client.post("/alerts/confirm", json={"spot_id": "S1"}, headers=headers("bob"))

        assert resp.status_code == 200
        assert resp.json()["alert"]["id"] == alert_id
        assert resp.json()["total_confirmations"] == 2

        danger = client.get("/alerts/spot/S1/danger").json()
        assert danger["level"] == "caution"
        assert danger["reasons"] == ["theft"]

        assert len(client.get("/alerts/spot/S1").json()) == 1
        assert client.get(f"/alerts/{alert_id}").status_code == 200
        assert client.get("/alerts/danger_missing").status_code == 404

    def test_reasons_and_dangerous_spots(self, client):
        assert {r["id"] for r in client.get("/alerts/reasons").json()} == {
            "theft", "assault", "hostile_police", "dangerous_road", "wild_animals",
        }
        report(client, "alice", spot_id="S7", reason="wild_animals")
        spots = client.get("/alerts/dangerous-spots").json()
        assert [s["spot_id"] for s in spots] == ["S7"]


class TestProposalRoutes:

    def test_proposal_lifecycle(self, client):
        resp = client.post("/proposals", json={"spot_id": "S1"}, headers=headers("mod"))
        assert resp.status_code == 201
        proposal_id = resp.json()["id"]

        again = client.post("/proposals", json={"spot_id": "S1"}, headers=headers("mod"))
        assert again.status_code == 409

        assert client.get("/proposals/spot/S1").json()["id"] == proposal_id
        assert [p["id"] for p in client.get("/proposals/pending").json()] == [proposal_id]

        bad = client.post(f"/proposals/{proposal_id}/vote", json={"choice": "maybe"}, headers=headers("v1"))
        assert bad.status_code == 400

        last = None
        for voter in ["v1", "v2", "v3", "v4", "v5"]:
            last = client.post(f"/proposals/{proposal_id}/vote", json={"choice": "approve"}, headers=headers(voter))
        assert last.json()["resolved"] is True
        assert last.json()["proposal"]["status"] == "approved"
        assert client.get("/proposals/spot/S1").json() is None

        deleted = client.post(f"/admin/proposals/{proposal_id}/deleted")
        assert deleted.json()["status"] == "deleted"

    def test_unknown_proposal(self, client):
        assert client.get("/proposals/deletion_missing").status_code == 404
        resp = client.post("/proposals/deletion_missing/vote", json={"choice": "approve"}, headers=headers("v1"))
        assert resp.status_code == 404


class TestAdminRoutes:

    def test_dismiss_and_stats(self, client):
        alert_id = report(client, "alice").json()["id"]

        resp = client.post(f"/admin/alerts/{alert_id}/dismiss", json={"note": "spam"})
        assert resp.status_code == 200
        assert resp.json()["dismissal_reason"] == "spam"

        stats = client.get("/admin/stats").json()
        assert stats["dismissed_alerts"] == 1
        assert client.get("/alerts/spot/S1/danger").json()["level"] == "safe"

    def test_dismissed_alert_cannot_be_resolved(self, client):
        alert_id = report(client, "alice").json()["id"]
        client.post(f"/admin/alerts/{alert_id}/dismiss", json={"note": "spam"})

        resp = client.post(f"/admin/alerts/{alert_id}/resolve", json={"note": "fixed"})
        assert resp.status_code == 409
        assert resp.json()["detail"]["error"] == "alert_closed"

    def test_resolve_unknown_alert(self, client):
        resp = client.post("/admin/alerts/danger_missing/resolve", json={"note": "n/a"})
        assert resp.status_code == 404

    def test_refresh_and_clear(self, client):
        report(client, "alice")
        assert client.post("/admin/spots/S1/refresh").json()["level"] == "caution"

        cleared = client.delete("/admin/danger-data").json()
        assert cleared["alerts_deleted"] == 1
        assert client.get("/alerts/spot/S1").json() == []


def test_root_and_health(client):
    root = client.get("/").json()
    assert root["thresholds"] == {"confirm": 3, "delete": 5, "vote_quorum": 5}
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/health/db").json()["connected"] is True


def test_health_db_reports_unreachable_store(client, catalog, notifier, config):
    from unittest.mock import MagicMock

    import hazardhub.services.hazard_service as service_mod
    from hazardhub.services.hazard_service import HazardService
    from hazardhub.storage.firestore_store import FirestoreStore

    db = MagicMock()
    db.collections.side_effect = ConnectionError("firestore unreachable")
    service_mod._hazard_service = HazardService(FirestoreStore(db), catalog=catalog, notifier=notifier, config=config)

    resp = client.get("/health/db")
    assert resp.status_code == 503
    assert "firestore unreachable" in resp.json()["detail"]
