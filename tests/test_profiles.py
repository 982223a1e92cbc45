from datetime import datetime

import pytest

from community_circle.db import models
from community_circle.services.profile_service import compute_trust_score
from tests.conftest import auth

NOW = datetime(2030, 1, 1)


@pytest.mark.parametrize("email,phone,id_check,expected", [
    (None, None, None, 0),
    (NOW, None, None, 10),
    (NOW, NOW, None, 30),
    (NOW, NOW, NOW, 60),
    (None, NOW, None, 20),
    (None, None, NOW, 30),
])
def test_trust_score(email, phone, id_check, expected):
    assert compute_trust_score(email, phone, id_check) == expected


def test_trust_score_never_decreases_when_a_verification_is_added():
    flags = [None, NOW]
    for email in flags:
        for phone in flags:
            for id_check in flags:
                base = compute_trust_score(email, phone, id_check)
                assert compute_trust_score(NOW, phone, id_check) >= base
                assert compute_trust_score(email, NOW, id_check) >= base
                assert compute_trust_score(email, phone, NOW) >= base


class TestSignUp:
    def test_sign_up(self, client):
        response = client.post("/auth/sign-up", json={
            "name": "Jamie Rivera",
            "email": "Jamie@Example.com",
            "password": "Stroller2030"
        })
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "jamie@example.com"
        assert body["name"] == "Jamie Rivera"

    def test_duplicate_email_conflicts(self, client):
        payload = {"name": "Jamie", "email": "jamie@example.com", "password": "Stroller2030"}
        assert client.post("/auth/sign-up", json=payload).status_code == 201

        response = client.post("/auth/sign-up", json={**payload, "email": "JAMIE@example.com"})
        assert response.status_code == 409
        assert response.json() == {"error": "An account with this email already exists"}

    @pytest.mark.parametrize("password,message", [
        ("Short1", "Password must be at least 8 characters"),
        ("alllowercase1", "Password must contain at least one uppercase letter"),
        ("NoNumbersHere", "Password must contain at least one number"),
    ])
    def test_weak_password(self, client, password, message):
        response = client.post("/auth/sign-up", json={
            "name": "Jamie", "email": "jamie@example.com", "password": password
        })
        assert response.status_code == 400
        assert response.json()["error"] == message

    @pytest.mark.parametrize("email", ["not-an-email", "x@y..z", '"@x.y', "me@-bad-.com"])
    def test_invalid_email(self, client, db, email):
        response = client.post("/auth/sign-up", json={
            "name": "Jamie", "email": email, "password": "Stroller2030"
        })
        assert response.status_code == 400
        assert db.query(models.User).count() == 0

    def test_password_is_hashed(self, client, db):
        client.post("/auth/sign-up", json={
            "name": "Jamie", "email": "jamie@example.com", "password": "Stroller2030"
        })
        user = db.query(models.User).filter(models.User.email == "jamie@example.com").first()
        assert user.password_hash != "Stroller2030"
        assert user.role == models.Role.USER.value


class TestMe:
    def test_requires_identity(self, client):
        response = client.get("/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_unknown_user_is_rejected(self, client):
        assert client.get("/me", headers=auth(9999)).status_code == 401

    def test_returns_profile(self, client, make_user):
        user_id = make_user(phone_verified=True)
        response = client.get("/me", headers=auth(user_id))
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == user_id
        assert body["profile"]["trust_score"] == 30

    def test_suspended_user_is_rejected(self, client, db, make_user):
        user_id = make_user()
        user = db.get(models.User, user_id)
        user.suspended_at = datetime.utcnow()
        db.commit()

        assert client.get("/me", headers=auth(user_id)).status_code == 401


ONBOARDING = {
    "city": "Philadelphia",
    "latitude": 39.95,
    "longitude": -75.16,
    "radius_miles": 5,
    "interests": ["walks", "library"],
    "kids_age_ranges": ["0-2"],
}


class TestOnboarding:
    def test_creates_profile(self, client, make_user):
        user_id = make_user(with_profile=False)
        response = client.post("/onboarding", json=ONBOARDING, headers=auth(user_id))
        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["city"] == "Philadelphia"
        assert profile["interests"] == ["walks", "library"]
        assert profile["trust_score"] == 0

    def test_updates_existing_profile(self, client, make_user):
        user_id = make_user()
        response = client.post(
            "/onboarding",
            json={**ONBOARDING, "city": "  Camden  "},
            headers=auth(user_id)
        )
        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["city"] == "Camden"
        assert profile["trust_score"] == 10

    def test_settings_only_update_skips_onboarding_checks(self, client, make_user):
        user_id = make_user()
        response = client.post(
            "/onboarding", json={"screen_light_mode": True}, headers=auth(user_id)
        )
        assert response.status_code == 200
        assert response.json()["profile"]["screen_light_mode"] is True

    @pytest.mark.parametrize("override,message", [
        ({"city": "X"}, "City is required"),
        ({"latitude": 91}, "Latitude must be between -90 and 90"),
        ({"radius_miles": 0.5}, "Radius must be at least 1 mile"),
        ({"radius_miles": 51}, "Radius must be at most 50 miles"),
        ({"interests": []}, "Select at least one interest"),
        ({"kids_age_ranges": ["0-2"] * 6}, "You can select up to 5 age ranges"),
    ])
    def test_validation(self, client, make_user, override, message):
        user_id = make_user(with_profile=False)
        response = client.post("/onboarding", json={**ONBOARDING, **override}, headers=auth(user_id))
        assert response.status_code == 400
        assert response.json()["error"] == message


class TestVerification:
    def test_email_then_phone(self, client, make_user):
        user_id = make_user(email_verified=False)

        response = client.post("/verify/email", headers=auth(user_id))
        assert response.status_code == 200
        assert response.json()["profile"]["trust_score"] == 10

        response = client.post("/verify/phone", json={"code": "123456"}, headers=auth(user_id))
        assert response.status_code == 200
        assert response.json()["profile"]["trust_score"] == 30

    def test_wrong_phone_code(self, client, make_user):
        user_id = make_user()
        response = client.post("/verify/phone", json={"code": "000000"}, headers=auth(user_id))
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid verification code"}

    def test_verifying_twice_conflicts(self, client, make_user):
        user_id = make_user()
        response = client.post("/verify/email", headers=auth(user_id))
        assert response.status_code == 409

    def test_needs_profile(self, client, make_user):
        user_id = make_user(with_profile=False)
        assert client.post("/verify/email", headers=auth(user_id)).status_code == 404
