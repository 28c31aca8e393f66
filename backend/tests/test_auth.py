import time


class TestRegister:
    def test_register_user(self, client):
        r = client.post("/api/auth/register", json={
            "name": "Alice",
            "email": "Alice@Example.com",
            "password": "correct-horse-1",
        })
        assert r.status_code == 201
        data = r.json()
        assert data["name"] == "Alice"
        assert data["email"] == "alice@example.com"
        assert "password" not in data
        assert "passwordHash" not in data

    def test_register_rejects_short_password(self, client):
        r = client.post("/api/auth/register", json={
            "name": "Alice", "email": "alice@example.com", "password": "short",
        })
        assert r.status_code == 400

    def test_register_rejects_blank_name(self, client):
        r = client.post("/api/auth/register", json={
            "name": "  ", "email": "alice@example.com", "password": "correct-horse-1",
        })
        assert r.status_code == 400
        assert r.json() == {"message": "Missing required fields"}

    def test_register_rejects_duplicate_email(self, client, login):
        login()
        r = client.post("/api/auth/register", json={
            "name": "Other Alice", "email": "ALICE@example.com", "password": "another-pass-2",
        })
        assert r.status_code == 409
        assert r.json() == {"message": "User already exists"}

    def test_register_malformed_body(self, client):
        r = client.post("/api/auth/register", json={"name": "Alice"})
        assert r.status_code == 400


class TestLogin:
    def test_login_returns_token(self, client, login):
        _, h = login()
        token = h["Authorization"][7:]
        assert len(token) == 64  # 32 bytes hex

    def test_login_wrong_password(self, client, login):
        login()
        r = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
        assert r.status_code == 401
        assert r.json() == {"message": "Invalid credentials"}

    def test_login_unknown_user(self, client):
        r = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever-1"})
        assert r.status_code == 401

    def test_login_throttled_after_repeated_failures(self, client, login):
        login()
        for _ in range(3):
            r = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "bad-pass"})
            assert r.status_code == 401

        r = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "correct-horse-1"})
        assert r.status_code == 429
        assert r.json()["retry_after_seconds"] > 0
        assert "retry-after" in r.headers


class TestSession:
    def test_me(self, client, login):
        user_id, h = login()
        r = client.get("/api/auth/me", headers=h)
        assert r.status_code == 200
        assert r.json()["id"] == user_id

    def test_me_requires_token(self, client):
        r = client.get("/api/auth/me")
        assert r.status_code == 401
        assert r.json() == {"message": "Missing bearer token"}

    def test_me_rejects_non_bearer_header(self, client, login):
        login()
        r = client.get("/api/auth/me", headers={"Authorization": "Basic abc"})
        assert r.status_code == 401

    def test_logout_revokes_token(self, client, login):
        _, h = login()
        assert client.post("/api/auth/logout", headers=h).status_code == 200
        assert client.get("/api/auth/me", headers=h).status_code == 401

    def test_expired_token_rejected(self, client, login, fresh_auth_service):
        _, h = login()
        token = h["Authorization"][7:]
        user_id, _ = fresh_auth_service._active_tokens[token]
        fresh_auth_service._active_tokens[token] = (user_id, time.time() - 1)

        r = client.get("/api/events", headers=h)
        assert r.status_code == 401

    def test_activity_extends_token(self, client, login, fresh_auth_service):
        _, h = login()
        token = h["Authorization"][7:]
        user_id, _ = fresh_auth_service._active_tokens[token]
        fresh_auth_service._active_tokens[token] = (user_id, time.time() + 5)

        client.get("/api/auth/me", headers=h)
        assert fresh_auth_service._active_tokens[token][1] > time.time() + 60


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_lifespan_prepares_data_dir(self, data_settings, tmp_data, fresh_auth_service):
        from fastapi.testclient import TestClient
        from college_events.main import app

        with TestClient(app) as c:
            assert c.get("/health").status_code == 200
            assert (tmp_data / "uploads").is_dir()
            assert (tmp_data / "db.sqlite").exists()
        assert fresh_auth_service._active_tokens == {}
