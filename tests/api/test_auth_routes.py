"""Integration tests for the portal login routes."""
import pytest

from agricart.infrastructure.auth.jwt_handler import verify_token
from tests.conftest import PASSWORD


def _login(client, portal, identifier, password=PASSWORD, **kwargs):
    field = "member_id" if portal == "member" else "email"
    return client.post(f"/api/auth/{portal}/login", json={field: identifier, "password": password}, **kwargs)


class TestPortalLogin:
    @pytest.mark.parametrize("portal, identifier, role", [
        ("customer", "buyer@agricart.test", "customer"),
        ("admin", "admin@agricart.test", "admin"),
        ("admin", "staff@agricart.test", "staff"),
        ("member", "M-0001", "member"),
        ("logistic", "rider@agricart.test", "logistic"),
    ])
    def test_successful_login(self, client, portal, identifier, role):
        resp = _login(client, portal, identifier)
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["token_type"] == "bearer"
        assert data["user"]["user_type"] == role
        assert "password_hash" not in data["user"]
        payload = verify_token(data["access_token"])
        assert payload["role"] == role
        assert payload["portal"] == portal

    def test_malformed_email_rejected(self, client):
        resp = client.post("/api/auth/customer/login", json={"email": "not-an-email", "password": "x"})
        assert resp.status_code == 422

    def test_missing_member_id_rejected(self, client):
        resp = client.post("/api/auth/member/login", json={"password": "x"})
        assert resp.status_code == 422


class TestFailedLogin:
    def test_wrong_password(self, client):
        resp = _login(client, "customer", "buyer@agricart.test", "wrong")
        assert resp.status_code == 422
        assert resp.json()["detail"] == {"email": "auth.failed"}

    def test_unknown_member_id(self, client):
        resp = _login(client, "member", "M-9999", "wrong")
        assert resp.status_code == 422
        assert resp.json()["detail"] == {"member_id": "auth.failed"}

    def test_wrong_portal_looks_like_bad_credentials(self, client):
        wrong_portal = _login(client, "admin", "buyer@agricart.test")
        bad_password = _login(client, "admin", "admin@agricart.test", "wrong")
        assert wrong_portal.status_code == bad_password.status_code == 422
        assert wrong_portal.json() == bad_password.json()

    def test_deactivated(self, client):
        resp = _login(client, "customer", "gone@agricart.test")
        assert resp.status_code == 422
        assert resp.json()["detail"] == {"email": "auth.deactivated"}


class TestLockout:
    def test_fifth_failure_returns_lockout_payload(self, client):
        for _ in range(4):
            assert _login(client, "customer", "buyer@agricart.test", "wrong").status_code == 422
        resp = _login(client, "customer", "buyer@agricart.test", "wrong")
        assert resp.status_code == 422
        lockout = resp.json()["detail"]["lockout"]
        assert lockout["is_locked"] is True
        assert lockout["remaining_time"] == 60
        assert lockout["lock_level"] == 1

    def test_locked_returns_429_with_retry_after(self, client):
        for _ in range(5):
            _login(client, "customer", "buyer@agricart.test", "wrong")
        resp = _login(client, "customer", "buyer@agricart.test")
        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "60"
        detail = resp.json()["detail"]
        assert detail["email"] == "auth.locked"
        assert detail["lockout"]["formatted_time"] == "1m 00s"

    def test_lock_lifts_after_duration(self, client, clock):
        for _ in range(5):
            _login(client, "customer", "buyer@agricart.test", "wrong")
        clock.advance(60)
        assert _login(client, "customer", "buyer@agricart.test").status_code == 200

    def test_lock_is_per_portal(self, client):
        for _ in range(5):
            _login(client, "logistic", "rider@agricart.test", "wrong")
        assert _login(client, "logistic", "rider@agricart.test").status_code == 429
        assert _login(client, "customer", "buyer@agricart.test").status_code == 200

    def test_forwarded_for_ignored_by_default(self, client):
        for n in range(5):
            _login(client, "customer", f"user{n}@x.test", "wrong",
                   headers={"X-Forwarded-For": f"10.0.0.{n}"})
        assert _login(client, "customer", "buyer@agricart.test").status_code == 429

    def test_forwarded_for_used_when_trusted(self, client, monkeypatch):
        monkeypatch.setenv("TRUST_FORWARDED_FOR", "true")
        for n in range(5):
            _login(client, "customer", f"user{n}@x.test", "wrong",
                   headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})
        blocked = _login(client, "customer", "buyer@agricart.test", headers={"X-Forwarded-For": "10.0.0.1"})
        allowed = _login(client, "customer", "buyer@agricart.test", headers={"X-Forwarded-For": "10.0.0.2"})
        assert blocked.status_code == 429
        assert allowed.status_code == 200


class TestStoreUnavailable:
    def test_fail_closed_returns_503(self, client, governor, monkeypatch):
        from agricart.domain.errors import AttemptStoreError

        def down(*args, **kwargs):
            raise AttemptStoreError("connection refused")

        monkeypatch.setattr(governor._store, "get", down)
        resp = _login(client, "customer", "buyer@agricart.test")
        assert resp.status_code == 503
