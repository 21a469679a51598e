"""Integration tests for lockout status and admin unlock routes."""
from agricart.infrastructure.auth.jwt_handler import create_access_token


def _fail(client, times, email="buyer@agricart.test"):
    for _ in range(times):
        client.post("/api/auth/customer/login", json={"email": email, "password": "wrong"})


def _admin_headers(role="admin"):
    return {"Authorization": f"Bearer {create_access_token('admin-1', role, 'admin')}"}


class TestLockoutCheck:
    def test_unlocked_shape(self, client):
        resp = client.post("/api/lockout/customer/check", json={"email": "buyer@agricart.test"})
        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == {
            "locked", "failed_attempts", "lock_level", "remaining_time",
            "lock_expires_at", "server_time", "formatted_time",
        }
        assert data["locked"] is False
        assert data["lock_expires_at"] is None
        assert data["remaining_time"] == 0

    def test_locked_state(self, client, clock):
        _fail(client, 5)
        clock.advance(15)
        data = client.post("/api/lockout/customer/check", json={"email": "buyer@agricart.test"}).json()
        assert data["locked"] is True
        assert data["failed_attempts"] == 5
        assert data["lock_level"] == 1
        assert data["remaining_time"] == 45
        assert data["formatted_time"] == "45s"
        assert data["lock_expires_at"] is not None

    def test_check_does_not_count(self, client):
        for _ in range(6):
            client.post("/api/lockout/customer/check", json={"email": "buyer@agricart.test"})
        data = client.post("/api/lockout/customer/check", json={"email": "buyer@agricart.test"}).json()
        assert data["failed_attempts"] == 0

    def test_unreadable_record_returns_503(self, client, store):
        store.set("login_attempts:id:customer:buyer@agricart.test:lock", "{broken")
        resp = client.post("/api/lockout/customer/check", json={"email": "buyer@agricart.test"})
        assert resp.status_code == 503

    def test_member_requires_member_id(self, client):
        resp = client.post("/api/lockout/member/check", json={"email": "farmer@agricart.test"})
        assert resp.status_code == 422
        assert resp.json()["detail"] == {"member_id": "validation.required"}

    def test_unknown_user_type(self, client):
        resp = client.post("/api/lockout/supplier/check", json={"email": "a@b.c"})
        assert resp.status_code == 422

    def test_rate_limited_after_ten(self, client):
        for _ in range(10):
            assert client.post("/api/lockout/customer/check", json={"email": "a@b.c"}).status_code == 200
        resp = client.post("/api/lockout/customer/check", json={"email": "a@b.c"})
        assert resp.status_code == 429
        detail = resp.json()["detail"]
        assert detail["error"] == "too_many_requests"
        assert detail["retry_after"] == 60
        assert resp.headers["Retry-After"] == "60"


class TestAdminUnlock:
    def test_admin_clears_identifier_lock(self, client):
        _fail(client, 5)
        resp = client.delete("/api/lockout/customer/buyer@agricart.test", headers=_admin_headers())
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "cleared": True, "by": "admin-1"}

    def test_unlock_is_logged_with_admin_id(self, client, events):
        client.delete("/api/lockout/customer/buyer@agricart.test", headers=_admin_headers())
        reset = events.events[-1]
        assert reset["action"] == "login_lockout_reset"
        assert reset["user_id"] == "admin-1"

    def test_nothing_to_clear(self, client):
        resp = client.delete("/api/lockout/customer/nobody@agricart.test", headers=_admin_headers())
        assert resp.json()["cleared"] is False

    def test_requires_token(self, client):
        assert client.delete("/api/lockout/customer/buyer@agricart.test").status_code == 401

    def test_staff_forbidden(self, client):
        resp = client.delete("/api/lockout/customer/buyer@agricart.test", headers=_admin_headers("staff"))
        assert resp.status_code == 403
