"""Tests for Event create / read / update / delete / invite over HTTP.

Covers:
- Organizer seeded on create, date-in-past rule, field bounds
- Partial update semantics and organizer-only mutation
- NotFound precedence over Forbidden
- Invite: skip existing members, conflict when nothing is new
- Delete cascades to responses
"""
from tests.conftest import as_user, create_test_event, create_test_user, invite, today_iso


def _event_payload(**overrides):
    payload = {
        "title": "Team Standup",
        "description": "Daily sync for the whole team",
        "date": today_iso(1),
        "time": "09:30",
        "location": "Room 42, HQ",
    }
    payload.update(overrides)
    return payload


def _setup(client):
    """Create an organizer, two other users, and an event owned by the organizer."""
    organizer = create_test_user(client, name="Organizer")
    alice = create_test_user(client, name="Alice")
    bob = create_test_user(client, name="Bob")
    event = create_test_event(client, organizer)
    return organizer, alice, bob, event


class TestEventCreate:
    """Event creation and initial state."""

    def test_create_event(self, client):
        organizer = create_test_user(client, name="Organizer")
        event = create_test_event(client, organizer, title="Dinner")
        assert event["title"] == "Dinner"
        assert event["participants"] == [{"user_id": organizer["user_id"], "role": "organizer"}]
        assert event["created_at"] == event["updated_at"]

    def test_create_event_today_allowed(self, client):
        organizer = create_test_user(client, name="Organizer")
        resp = client.post("/api/events/", headers=as_user(organizer), json=_event_payload(date=today_iso(0)))
        assert resp.status_code == 201

    def test_create_event_in_past_rejected(self, client):
        organizer = create_test_user(client, name="Organizer")
        resp = client.post("/api/events/", headers=as_user(organizer), json=_event_payload(date=today_iso(-1)))
        assert resp.status_code == 400
        assert resp.json()["kind"] == "invalid_input"

    def test_create_event_bad_date_format(self, client):
        organizer = create_test_user(client, name="Organizer")
        resp = client.post("/api/events/", headers=as_user(organizer), json=_event_payload(date="next tuesday"))
        assert resp.status_code == 400

    def test_create_event_field_bounds(self, client):
        organizer = create_test_user(client, name="Organizer")
        for field, value in (("title", "ab"), ("description", "too short"), ("location", "abc"), ("title", "x" * 201)):
            resp = client.post("/api/events/", headers=as_user(organizer), json=_event_payload(**{field: value}))
            assert resp.status_code == 400, (field, value)
            assert field in resp.json()["errors"]

    def test_date_is_zero_padded(self, client):
        organizer = create_test_user(client, name="Organizer")
        resp = client.post("/api/events/", headers=as_user(organizer), json=_event_payload(date="2999-1-5"))
        assert resp.status_code == 201
        assert resp.json()["date"] == "2999-01-05"


class TestEventRead:

    def test_get_event_includes_caller_view(self, client):
        organizer, alice, _, event = _setup(client)
        invite(client, organizer, event, alice)

        resp = client.get(f"/api/events/{event['event_id']}", headers=as_user(organizer))
        assert resp.status_code == 200
        assert resp.json()["my_role"] == "organizer"

        resp = client.get(f"/api/events/{event['event_id']}", headers=as_user(alice))
        assert resp.json()["my_role"] == "attendee"
        assert resp.json()["my_status"] == "no_response"

    def test_get_event_non_member(self, client):
        _, alice, _, event = _setup(client)
        resp = client.get(f"/api/events/{event['event_id']}", headers=as_user(alice))
        assert resp.status_code == 200
        assert resp.json()["my_role"] == "non_member"
        assert resp.json()["my_status"] is None

    def test_get_event_not_found(self, client):
        organizer = create_test_user(client, name="Organizer")
        resp = client.get("/api/events/00000000-0000-0000-0000-000000000000", headers=as_user(organizer))
        assert resp.status_code == 404
        assert resp.json() == {"kind": "not_found", "detail": "Event not found"}

    def test_get_event_malformed_id(self, client):
        organizer = create_test_user(client, name="Organizer")
        resp = client.get("/api/events/not-an-id", headers=as_user(organizer))
        assert resp.status_code == 400

    def test_organized_and_invited_listings(self, client):
        organizer, alice, _, event = _setup(client)
        own = create_test_event(client, alice, title="Alice's Party")
        invite(client, organizer, event, alice)

        organized = client.get("/api/events/organized", headers=as_user(alice)).json()
        invited = client.get("/api/events/invited", headers=as_user(alice)).json()
        everything = client.get("/api/events/", headers=as_user(alice)).json()

        assert [e["event_id"] for e in organized] == [own["event_id"]]
        assert [e["event_id"] for e in invited] == [event["event_id"]]
        assert {e["event_id"] for e in everything} == {own["event_id"], event["event_id"]}


class TestEventUpdate:
    """Partial update with organizer-only authorization."""

    def test_partial_update_leaves_other_fields(self, client):
        organizer, _, _, event = _setup(client)
        resp = client.patch(
            f"/api/events/{event['event_id']}", headers=as_user(organizer), json={"title": "Retro"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Retro"
        assert data["description"] == event["description"]
        assert data["location"] == event["location"]
        assert data["date"] == event["date"]
        assert data["updated_at"] > event["updated_at"]

    def test_put_is_also_partial(self, client):
        organizer, _, _, event = _setup(client)
        resp = client.put(
            f"/api/events/{event['event_id']}", headers=as_user(organizer), json={"time": "10:00"},
        )
        assert resp.status_code == 200
        assert resp.json()["time"] == "10:00"
        assert resp.json()["title"] == event["title"]

    def test_update_non_organizer_forbidden(self, client):
        organizer, alice, _, event = _setup(client)
        invite(client, organizer, event, alice)
        before = client.get(f"/api/events/{event['event_id']}", headers=as_user(organizer)).json()

        resp = client.patch(f"/api/events/{event['event_id']}", headers=as_user(alice), json={"title": "Hacked"})
        assert resp.status_code == 403

        after = client.get(f"/api/events/{event['event_id']}", headers=as_user(organizer)).json()
        assert after["title"] == event["title"]
        assert after["updated_at"] == before["updated_at"]

    def test_update_date_in_past_rejected(self, client):
        organizer, _, _, event = _setup(client)
        resp = client.patch(
            f"/api/events/{event['event_id']}", headers=as_user(organizer), json={"date": today_iso(-3)},
        )
        assert resp.status_code == 400

    def test_update_explicit_null_rejected(self, client):
        organizer, _, _, event = _setup(client)
        resp = client.patch(f"/api/events/{event['event_id']}", headers=as_user(organizer), json={"title": None})
        assert resp.status_code == 400
        assert resp.json()["kind"] == "invalid_input"

    def test_update_empty_string_rejected(self, client):
        organizer, _, _, event = _setup(client)
        resp = client.patch(f"/api/events/{event['event_id']}", headers=as_user(organizer), json={"location": ""})
        assert resp.status_code == 400

    def test_update_missing_event_not_found_even_for_stranger(self, client):
        stranger = create_test_user(client, name="Stranger")
        resp = client.patch(
            "/api/events/00000000-0000-0000-0000-000000000000", headers=as_user(stranger), json={"title": "Nope"},
        )
        assert resp.status_code == 404


class TestEventDelete:

    def test_delete_event(self, client):
        organizer, alice, _, event = _setup(client)
        invite(client, organizer, event, alice)
        client.post(f"/api/events/{event['event_id']}/responses", headers=as_user(alice), json={"status": "going"})

        resp = client.delete(f"/api/events/{event['event_id']}", headers=as_user(organizer))
        assert resp.status_code == 200
        assert resp.json() == {
            "event_id": event["event_id"],
            "deleted": True,
            "cascade_completed": True,
            "responses_deleted": 1,
        }
        resp = client.get(f"/api/events/{event['event_id']}", headers=as_user(organizer))
        assert resp.status_code == 404

    def test_delete_non_organizer_forbidden(self, client):
        organizer, alice, _, event = _setup(client)
        invite(client, organizer, event, alice)
        resp = client.delete(f"/api/events/{event['event_id']}", headers=as_user(alice))
        assert resp.status_code == 403
        assert client.get(f"/api/events/{event['event_id']}", headers=as_user(alice)).status_code == 200

    def test_delete_missing_event_not_found(self, client):
        stranger = create_test_user(client, name="Stranger")
        resp = client.delete("/api/events/00000000-0000-0000-0000-000000000000", headers=as_user(stranger))
        assert resp.status_code == 404


class TestInvite:

    def test_invite_users(self, client):
        organizer, alice, bob, event = _setup(client)
        resp = invite(client, organizer, event, alice, bob)
        assert resp.status_code == 200
        assert resp.json() == {"invited_count": 2}

        participants = client.get(f"/api/events/{event['event_id']}", headers=as_user(organizer)).json()["participants"]
        assert participants == [
            {"user_id": organizer["user_id"], "role": "organizer"},
            {"user_id": alice["user_id"], "role": "attendee"},
            {"user_id": bob["user_id"], "role": "attendee"},
        ]

    def test_invite_mixed_adds_only_new(self, client):
        organizer, alice, bob, event = _setup(client)
        invite(client, organizer, event, alice)
        resp = invite(client, organizer, event, alice, bob, organizer)
        assert resp.json() == {"invited_count": 1}

    def test_invite_all_existing_conflict(self, client):
        organizer, alice, _, event = _setup(client)
        invite(client, organizer, event, alice)
        resp = invite(client, organizer, event, alice, organizer)
        assert resp.status_code == 409
        assert resp.json() == {"kind": "conflict", "detail": "All users are already invited to this event"}

    def test_invite_non_organizer_forbidden(self, client):
        organizer, alice, bob, event = _setup(client)
        invite(client, organizer, event, alice)
        resp = invite(client, alice, event, bob)
        assert resp.status_code == 403

    def test_invite_empty_list_rejected(self, client):
        organizer, _, _, event = _setup(client)
        resp = client.post(
            f"/api/events/{event['event_id']}/invite", headers=as_user(organizer), json={"user_ids": []},
        )
        assert resp.status_code == 400

    def test_invite_malformed_user_id(self, client):
        organizer, _, _, event = _setup(client)
        resp = client.post(
            f"/api/events/{event['event_id']}/invite", headers=as_user(organizer), json={"user_ids": ["zzz"]},
        )
        assert resp.status_code == 400

    def test_invite_bumps_updated_at(self, client):
        organizer, alice, _, event = _setup(client)
        invite(client, organizer, event, alice)
        current = client.get(f"/api/events/{event['event_id']}", headers=as_user(organizer)).json()
        assert current["updated_at"] > event["updated_at"]
