"""Tests for RSVP responses, statistics and the host's response list."""
import pytest

from tests.conftest import auth_headers, create_test_pact, register_user, rsvp


def _setup(client, **pact_fields):
    alice = register_user(client, name="Alice", email="alice@example.com")
    bob = register_user(client, name="Bob", email="bob@example.com")
    pact = create_test_pact(client, alice["token"], title="Picnic", **pact_fields)
    return alice, bob, pact


def _stats(client, token, pact_id):
    resp = client.get(f"/api/pacts/{pact_id}/stats", headers=auth_headers(token))
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestRecordResponse:
    def test_picnic_scenario(self, api):
        alice = register_user(api, name="Alice", email="alice@example.com")
        pact = create_test_pact(api, alice["token"], title="Picnic")
        assert len(pact["guests"]) == 2

        bob = register_user(api, name="Bob", email="bob@example.com")
        resp = rsvp(api, bob["token"], pact["pact_id"], "confirmed", plus_ones=0)
        assert resp.status_code == 200
        assert resp.json()["status"] == "confirmed"
        assert resp.json()["responded_at"] is not None

        stats = _stats(api, alice["token"], pact["pact_id"])
        assert stats["confirmed"] == 1
        assert stats["pending"] == 0
        assert stats["declined"] == 0
        assert stats["total_attendees"] == 2

    def test_last_write_wins(self, api):
        alice, bob, pact = _setup(api)
        first = rsvp(api, bob["token"], pact["pact_id"], "confirmed")
        second = rsvp(api, bob["token"], pact["pact_id"], "declined", message="Sorry!")
        assert second.status_code == 200
        assert second.json()["rsvp_id"] == first.json()["rsvp_id"]

        rows = api.get(f"/api/pacts/{pact['pact_id']}/rsvps", headers=auth_headers(alice["token"])).json()
        bob_rows = [r for r in rows if r["guest_email"] == "bob@example.com"]
        assert len(bob_rows) == 1
        assert bob_rows[0]["status"] == "declined"
        assert bob_rows[0]["message"] == "Sorry!"

    def test_attending_means_confirmed(self, client):
        alice, bob, pact = _setup(client)
        resp = rsvp(client, bob["token"], pact["pact_id"], "attending")
        assert resp.status_code == 200
        assert resp.json()["status"] == "confirmed"

    def test_response_key_alias(self, client):
        alice, bob, pact = _setup(client)
        resp = client.post(
            f"/api/pacts/{pact['pact_id']}/rsvp",
            json={"response": "declined"},
            headers=auth_headers(bob["token"]),
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "declined"

    @pytest.mark.parametrize("status", ["maybe", "pending", "", None])
    def test_invalid_status(self, client, status):
        alice, bob, pact = _setup(client)
        resp = rsvp(client, bob["token"], pact["pact_id"], status)
        assert resp.status_code == 400

    @pytest.mark.parametrize("status", ["confirmed", "declined", "attending"])
    def test_plus_ones_rejected_when_not_allowed(self, client, status):
        alice, bob, pact = _setup(client)
        resp = rsvp(client, bob["token"], pact["pact_id"], status, plusOnes=1)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Plus-ones are not allowed for this pact"

    def test_plus_ones_counted_when_allowed(self, client):
        alice, bob, pact = _setup(client, allowPlusOnes=True)
        resp = rsvp(client, bob["token"], pact["pact_id"], "confirmed", plusOnes=2)
        assert resp.status_code == 200
        assert resp.json()["plus_ones"] == 2
        assert _stats(client, alice["token"], pact["pact_id"])["total_attendees"] == 4

    def test_decline_drops_plus_ones(self, client):
        alice, bob, pact = _setup(client, allowPlusOnes=True)
        rsvp(client, bob["token"], pact["pact_id"], "confirmed", plusOnes=2)
        resp = rsvp(client, bob["token"], pact["pact_id"], "declined", plusOnes=2)
        assert resp.json()["plus_ones"] == 0
        assert _stats(client, alice["token"], pact["pact_id"])["total_attendees"] == 1

    def test_negative_plus_ones(self, client):
        alice, bob, pact = _setup(client, allowPlusOnes=True)
        resp = rsvp(client, bob["token"], pact["pact_id"], "confirmed", plusOnes=-1)
        assert resp.status_code == 400

    def test_outsider_not_invited(self, api):
        alice, bob, pact = _setup(api)
        carol = register_user(api, name="Carol", email="carol@example.com")
        resp = rsvp(api, carol["token"], pact["pact_id"], "confirmed")
        assert resp.status_code == 403
        assert resp.json()["detail"] == "You are not invited to this pact"
        assert _stats(api, alice["token"], pact["pact_id"])["confirmed"] == 0

    def test_unknown_pact(self, client):
        bob = register_user(client, name="Bob", email="bob@example.com")
        resp = rsvp(client, bob["token"], "missing", "confirmed")
        assert resp.status_code == 404

    def test_host_cannot_rsvp(self, client):
        alice, bob, pact = _setup(client)
        resp = rsvp(client, alice["token"], pact["pact_id"], "declined")
        assert resp.status_code == 400
        host = next(g for g in _guests(client, alice, pact) if g["email"] == "alice@example.com")
        assert host["status"] == "attending"

    def test_cancelled_pact(self, client):
        alice, bob, pact = _setup(client)
        client.post(f"/api/pacts/{pact['pact_id']}/cancel", headers=auth_headers(alice["token"]))
        resp = rsvp(client, bob["token"], pact["pact_id"], "confirmed")
        assert resp.status_code == 400

    def test_max_attendees(self, client):
        alice = register_user(client)
        bob = register_user(client, name="Bob", email="bob@example.com")
        carol = register_user(client, name="Carol", email="carol@example.com")
        pact = create_test_pact(client, alice["token"], maxAttendees=2, guests=[
            {"email": "bob@example.com"}, {"email": "carol@example.com"},
        ])
        assert rsvp(client, bob["token"], pact["pact_id"], "confirmed").status_code == 200
        full = rsvp(client, carol["token"], pact["pact_id"], "confirmed")
        assert full.status_code == 400
        # Declining is always possible.
        assert rsvp(client, carol["token"], pact["pact_id"], "declined").status_code == 200
        # Re-confirming does not count the guest twice.
        assert rsvp(client, bob["token"], pact["pact_id"], "confirmed").status_code == 200

    def test_guest_invited_before_registering(self, client):
        alice = register_user(client)
        pact = create_test_pact(client, alice["token"], guests=[{"email": "late@example.com"}])
        late = register_user(client, name="Late", email="late@example.com")
        resp = rsvp(client, late["token"], pact["pact_id"], "confirmed")
        assert resp.status_code == 200

    def test_invited_address_answers_after_email_change(self, client):
        alice, bob, pact = _setup(client)
        bob_headers = auth_headers(bob["token"])
        assert client.patch(
            "/api/users/me", json={"email": "bob2@example.com"}, headers=bob_headers
        ).status_code == 200
        newcomer = register_user(client, name="Robin", email="bob@example.com")

        # Both identities resolve to the one row invited as bob@example.com.
        assert rsvp(client, newcomer["token"], pact["pact_id"], "declined").status_code == 200
        assert rsvp(client, bob["token"], pact["pact_id"], "confirmed").status_code == 200
        stats = client.get(f"/api/pacts/{pact['pact_id']}/stats", headers=auth_headers(alice["token"])).json()
        assert stats["total_invited"] == 1
        assert stats["confirmed"] == 1


def _guests(client, user, pact):
    return client.get(f"/api/pacts/{pact['pact_id']}/guests", headers=auth_headers(user["token"])).json()


class TestStats:
    def test_counts_add_up(self, api):
        alice = register_user(api)
        users = [
            register_user(api, name=n, email=f"{n.lower()}@example.com")
            for n in ("Bob", "Carol", "Dave")
        ]
        pact = create_test_pact(api, alice["token"], guests=[
            {"email": "bob@example.com"},
            {"email": "carol@example.com"},
            {"email": "dave@example.com"},
            {"email": "erin@example.com"},
        ])
        rsvp(api, users[0]["token"], pact["pact_id"], "confirmed")
        rsvp(api, users[1]["token"], pact["pact_id"], "declined")
        rsvp(api, users[2]["token"], pact["pact_id"], "confirmed")

        stats = _stats(api, users[0]["token"], pact["pact_id"])
        assert stats["total_invited"] == 4
        assert stats["pending"] + stats["confirmed"] + stats["declined"] == stats["total_invited"]
        assert stats == {
            "total_invited": 4,
            "confirmed": 2,
            "declined": 1,
            "pending": 1,
            "total_attendees": 3,
        }

    def test_outsider_cannot_read_stats(self, client):
        alice, bob, pact = _setup(client)
        carol = register_user(client, name="Carol", email="carol@example.com")
        resp = client.get(f"/api/pacts/{pact['pact_id']}/stats", headers=auth_headers(carol["token"]))
        assert resp.status_code == 403


class TestResponseList:
    def test_host_sees_latest_first(self, client):
        alice = register_user(client)
        bob = register_user(client, name="Bob", email="bob@example.com")
        carol = register_user(client, name="Carol", email="carol@example.com")
        pact = create_test_pact(client, alice["token"], guests=[
            {"email": "bob@example.com"}, {"email": "carol@example.com"},
        ])
        rsvp(client, bob["token"], pact["pact_id"], "confirmed")
        rsvp(client, carol["token"], pact["pact_id"], "declined")

        resp = client.get(f"/api/pacts/{pact['pact_id']}/rsvps", headers=auth_headers(alice["token"]))
        assert resp.status_code == 200
        rows = resp.json()
        responded = [r["guest_email"] for r in rows if r["status"] != "attending"]
        assert responded == ["carol@example.com", "bob@example.com"]
        assert rows[0]["guest_name"] == "Carol"

    def test_guest_cannot_list_responses(self, client):
        alice, bob, pact = _setup(client)
        resp = client.get(f"/api/pacts/{pact['pact_id']}/rsvps", headers=auth_headers(bob["token"]))
        assert resp.status_code == 403
