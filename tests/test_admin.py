from community_circle.db import models
from community_circle.db.models import EventStatus, Role
from tests.conftest import auth, event_payload


def report(client, reporter_id, target_type="EVENT", target_id=1, reason="SPAM", notes=None):
    body = {"target_type": target_type, "target_id": target_id, "reason": reason}
    if notes is not None:
        body["notes"] = notes
    return client.post("/reports", json=body, headers=auth(reporter_id))


class TestReports:
    def test_create_report(self, client, make_user, make_event):
        reporter = make_user()
        event_id = make_event(make_user())
        response = report(client, reporter, target_id=event_id, notes="  Posted twice  ")
        assert response.status_code == 201
        body = response.json()["report"]
        assert body["status"] == "OPEN"
        assert body["notes"] == "Posted twice"
        assert body["reporter_user_id"] == reporter

    def test_notes_limit(self, client, make_user):
        response = report(client, make_user(), notes="x" * 501)
        assert response.status_code == 400
        assert response.json() == {"error": "Notes must be at most 500 characters"}

    def test_unknown_reason(self, client, make_user):
        assert report(client, make_user(), reason="RUDE").status_code == 400

    def test_requires_identity(self, client):
        response = client.post("/reports", json={"target_type": "USER", "target_id": 1, "reason": "SPAM"})
        assert response.status_code == 401


class TestAdminQueue:
    def test_list_and_resolve(self, client, make_user):
        admin_id = make_user(role=Role.ADMIN.value)
        reporter = make_user()
        first = report(client, reporter, target_type="USER", target_id=reporter).json()["report"]
        second = report(client, reporter, reason="HATE").json()["report"]

        reports = client.get("/admin/reports", headers=auth(admin_id)).json()["reports"]
        assert [r["id"] for r in reports] == [second["id"], first["id"]]
        assert reports[0]["reporter"]["id"] == reporter
        assert reports[0]["resolved_by"] is None

        response = client.post(f"/admin/reports/{first['id']}/resolve", headers=auth(admin_id))
        assert response.status_code == 200
        resolved = response.json()["report"]
        assert resolved["status"] == "RESOLVED"
        assert resolved["resolved_by_user_id"] == admin_id
        assert resolved["resolved_at"] is not None

        open_reports = client.get(
            "/admin/reports", params={"status": "OPEN"}, headers=auth(admin_id)
        ).json()["reports"]
        assert [r["id"] for r in open_reports] == [second["id"]]

        resolved_reports = client.get(
            "/admin/reports", params={"status": "RESOLVED"}, headers=auth(admin_id)
        ).json()["reports"]
        assert resolved_reports[0]["resolved_by"]["id"] == admin_id

    def test_resolving_twice_conflicts(self, client, make_user):
        admin_id = make_user(role=Role.ADMIN.value)
        report_id = report(client, make_user()).json()["report"]["id"]
        client.post(f"/admin/reports/{report_id}/resolve", headers=auth(admin_id))

        response = client.post(f"/admin/reports/{report_id}/resolve", headers=auth(admin_id))
        assert response.status_code == 409
        assert response.json() == {"error": "Report is already resolved"}

    def test_missing_report(self, client, make_user):
        admin_id = make_user(role=Role.ADMIN.value)
        assert client.post("/admin/reports/77/resolve", headers=auth(admin_id)).status_code == 404

    def test_non_admin_is_denied(self, client, make_user):
        user_id = make_user()
        for method, path in (
            ("get", "/admin/reports"),
            ("get", "/admin/flags"),
            ("post", "/admin/reports/1/resolve"),
            ("post", f"/admin/users/{user_id}/suspend"),
            ("post", "/admin/events/1/remove"),
        ):
            response = getattr(client, method)(path, headers=auth(user_id))
            assert response.status_code == 403, path

    def test_flags_are_listed(self, client, make_user):
        admin_id = make_user(role=Role.ADMIN.value)
        host_id = make_user()
        event = client.post(
            "/events",
            json=event_payload(title="Woke craft corner"),
            headers=auth(host_id)
        ).json()["event"]

        flags = client.get("/admin/flags", headers=auth(admin_id)).json()["flags"]
        assert len(flags) == 1
        assert flags[0]["target_id"] == event["id"]
        assert flags[0]["rule"] == "POLITICS"


class TestSuspension:
    def test_suspend_and_unsuspend(self, client, make_user):
        admin_id = make_user(role=Role.ADMIN.value)
        user_id = make_user()

        response = client.post(f"/admin/users/{user_id}/suspend", headers=auth(admin_id))
        assert response.status_code == 200
        assert response.json()["user"]["suspended_at"] is not None
        assert client.get("/me", headers=auth(user_id)).status_code == 401

        response = client.post(f"/admin/users/{user_id}/suspend", headers=auth(admin_id))
        assert response.status_code == 409
        assert response.json() == {"error": "User is already suspended"}

        response = client.post(f"/admin/users/{user_id}/unsuspend", headers=auth(admin_id))
        assert response.status_code == 200
        assert response.json()["user"]["suspended_at"] is None
        assert client.get("/me", headers=auth(user_id)).status_code == 200

    def test_unsuspend_active_user_conflicts(self, client, make_user):
        admin_id = make_user(role=Role.ADMIN.value)
        user_id = make_user()
        response = client.post(f"/admin/users/{user_id}/unsuspend", headers=auth(admin_id))
        assert response.status_code == 409
        assert response.json() == {"error": "User is not suspended"}

    def test_suspend_unknown_user(self, client, make_user):
        admin_id = make_user(role=Role.ADMIN.value)
        assert client.post("/admin/users/999/suspend", headers=auth(admin_id)).status_code == 404


class TestRemoveEvent:
    def test_remove(self, client, db, make_user, make_event):
        admin_id = make_user(role=Role.ADMIN.value)
        event_id = make_event(make_user())

        response = client.post(f"/admin/events/{event_id}/remove", headers=auth(admin_id))
        assert response.status_code == 200
        assert response.json()["event"]["status"] == "REMOVED"
        assert "location_notes_private" not in response.json()["event"]

        db.expire_all()
        assert db.get(models.Event, event_id).status == EventStatus.REMOVED.value

    def test_remove_twice_conflicts(self, client, make_user, make_event):
        admin_id = make_user(role=Role.ADMIN.value)
        event_id = make_event(make_user())
        client.post(f"/admin/events/{event_id}/remove", headers=auth(admin_id))

        response = client.post(f"/admin/events/{event_id}/remove", headers=auth(admin_id))
        assert response.status_code == 409
        assert response.json() == {"error": "Event is already removed"}

    def test_host_cannot_cancel_removed_event(self, client, make_user, make_event):
        admin_id = make_user(role=Role.ADMIN.value)
        host_id = make_user()
        event_id = make_event(host_id)
        client.post(f"/admin/events/{event_id}/remove", headers=auth(admin_id))

        response = client.post(f"/events/{event_id}/cancel", headers=auth(host_id))
        assert response.status_code == 409
        assert response.json() == {"error": "Event is already removed"}
