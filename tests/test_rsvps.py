from sqlalchemy.dialects import postgresql

from community_circle.db import models
from community_circle.db.models import EventStatus
from community_circle.services.rsvp_service import rsvp_service
from tests.conftest import auth


def going(client, event_id, user_id):
    return client.post(f"/events/{event_id}/rsvp", json={"status": "GOING"}, headers=auth(user_id))


class TestCapacity:
    def test_third_rsvp_to_a_two_person_event_is_rejected(self, client, db, make_user, make_event):
        host_id = make_user()
        event_id = make_event(host_id, max_attendees=2)
        first, second, third = make_user(), make_user(), make_user()

        assert going(client, event_id, first).status_code == 200
        assert going(client, event_id, second).status_code == 200

        response = going(client, event_id, third)
        assert response.status_code == 409
        assert response.json() == {"error": "This event is at full capacity"}

        going_rows = db.query(models.RSVP).filter(
            models.RSVP.event_id == event_id,
            models.RSVP.status == "GOING"
        ).count()
        assert going_rows == 2

    def test_reconfirming_at_capacity_is_idempotent(self, client, db, make_user, make_event):
        host_id = make_user()
        event_id = make_event(host_id, max_attendees=2)
        first, second = make_user(), make_user()
        going(client, event_id, first)
        going(client, event_id, second)

        response = going(client, event_id, first)
        assert response.status_code == 200
        assert response.json()["rsvp"]["status"] == "GOING"
        assert db.query(models.RSVP).filter(models.RSVP.event_id == event_id).count() == 2

    def test_cancelling_frees_a_seat(self, client, make_user, make_event):
        host_id = make_user()
        event_id = make_event(host_id, max_attendees=2)
        first, second, third = make_user(), make_user(), make_user()
        going(client, event_id, first)
        going(client, event_id, second)

        client.delete(f"/events/{event_id}/rsvp", headers=auth(first))
        assert going(client, event_id, third).status_code == 200

        # and the seat is gone again for the one who left
        assert going(client, event_id, first).status_code == 409

    def test_event_row_is_locked_for_capacity_check(self, db):
        query = rsvp_service.lock_event_query(db, 1)
        sql = str(query.statement.compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" in sql


class TestRSVP:
    def test_going_reveals_private_notes(self, client, make_user, make_event):
        host_id = make_user()
        event_id = make_event(host_id)
        response = going(client, event_id, make_user())
        assert response.status_code == 200
        assert response.json()["location_notes_private"] == "By the goat statue"

    def test_default_status_is_going(self, client, make_user, make_event):
        event_id = make_event(make_user())
        response = client.post(f"/events/{event_id}/rsvp", json={}, headers=auth(make_user()))
        assert response.status_code == 200
        assert response.json()["rsvp"]["status"] == "GOING"

    def test_cancel_via_status(self, client, make_user, make_event):
        event_id = make_event(make_user())
        parent_id = make_user()
        going(client, event_id, parent_id)

        response = client.post(
            f"/events/{event_id}/rsvp", json={"status": "CANCELLED"}, headers=auth(parent_id)
        )
        assert response.status_code == 200
        assert response.json()["rsvp"]["status"] == "CANCELLED"
        assert "location_notes_private" not in response.json()

    def test_cancel_without_rsvp(self, client, make_user, make_event):
        event_id = make_event(make_user())
        response = client.delete(f"/events/{event_id}/rsvp", headers=auth(make_user()))
        assert response.status_code == 404
        assert response.json() == {"error": "RSVP not found"}

    def test_regoing_reuses_the_row(self, client, db, make_user, make_event):
        event_id = make_event(make_user())
        parent_id = make_user()
        first_id = going(client, event_id, parent_id).json()["rsvp"]["id"]
        client.delete(f"/events/{event_id}/rsvp", headers=auth(parent_id))
        assert going(client, event_id, parent_id).json()["rsvp"]["id"] == first_id

    def test_inactive_event_rejects_rsvp(self, client, make_user, make_event):
        host_id = make_user()
        cancelled = make_event(host_id, status=EventStatus.CANCELLED.value)
        removed = make_event(host_id, status=EventStatus.REMOVED.value)
        for event_id in (cancelled, removed):
            response = going(client, event_id, make_user())
            assert response.status_code == 409
            assert response.json() == {"error": "Cannot RSVP to a cancelled or removed event"}

    def test_missing_event(self, client, make_user):
        assert going(client, 4242, make_user()).status_code == 404

    def test_requires_identity(self, client, make_user, make_event):
        event_id = make_event(make_user())
        assert client.post(f"/events/{event_id}/rsvp", json={"status": "GOING"}).status_code == 401

    def test_invalid_status(self, client, make_user, make_event):
        event_id = make_event(make_user())
        response = client.post(
            f"/events/{event_id}/rsvp", json={"status": "MAYBE"}, headers=auth(make_user())
        )
        assert response.status_code == 400


class TestCheckIn:
    def test_check_in(self, client, make_user, make_event):
        event_id = make_event(make_user())
        parent_id = make_user()
        going(client, event_id, parent_id)

        response = client.post(f"/events/{event_id}/checkin", headers=auth(parent_id))
        assert response.status_code == 200
        assert response.json()["rsvp"]["checked_in_at"] is not None

    def test_second_check_in_conflicts(self, client, make_user, make_event):
        event_id = make_event(make_user())
        parent_id = make_user()
        going(client, event_id, parent_id)
        client.post(f"/events/{event_id}/checkin", headers=auth(parent_id))

        response = client.post(f"/events/{event_id}/checkin", headers=auth(parent_id))
        assert response.status_code == 409
        assert response.json() == {"error": "You have already checked in"}

    def test_requires_going_rsvp(self, client, make_user, make_event):
        event_id = make_event(make_user())
        response = client.post(f"/events/{event_id}/checkin", headers=auth(make_user()))
        assert response.status_code == 400
        assert response.json() == {"error": "You must have a GOING RSVP to check in"}


class TestAttendees:
    def test_host_lists_attendees_in_rsvp_order(self, client, make_user, make_event):
        host_id = make_user()
        event_id = make_event(host_id)
        first, second = make_user(), make_user()
        going(client, event_id, first)
        going(client, event_id, second)

        response = client.get(f"/events/{event_id}/rsvps", headers=auth(host_id))
        assert response.status_code == 200
        rsvps = response.json()["rsvps"]
        assert [r["user"]["id"] for r in rsvps] == [first, second]
        assert rsvps[0]["user"]["email"].endswith("@example.com")

    def test_admin_can_list(self, client, make_user, make_event):
        event_id = make_event(make_user())
        admin_id = make_user(role=models.Role.ADMIN.value)
        assert client.get(f"/events/{event_id}/rsvps", headers=auth(admin_id)).status_code == 200

    def test_attendee_cannot_list(self, client, make_user, make_event):
        event_id = make_event(make_user())
        parent_id = make_user()
        going(client, event_id, parent_id)
        assert client.get(f"/events/{event_id}/rsvps", headers=auth(parent_id)).status_code == 403
