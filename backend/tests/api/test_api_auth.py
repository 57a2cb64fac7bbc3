"""
认证 API 测试
覆盖 /api/auth 端点与 Bearer / 角色依赖
"""
from datetime import timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient

from campus_hub.security.auth import create_access_token
from campus_hub.services.google_verifier import GoogleIdentity


class TestRegisterLogin:

    def test_register_returns_token(self, client: TestClient):
        response = client.post("/api/auth/register", json={
            "name": "New Student", "email": "new@campus.edu", "password": "secret1",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["roles"] == ["user"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "new@campus.edu"

    def test_register_duplicate(self, client: TestClient, student_user):
        response = client.post("/api/auth/register", json={
            "name": "Copy", "email": student_user.email, "password": "secret1",
        })
        assert response.status_code == 400
        assert response.json() == {"detail": "Email already registered", "error": "invalid_argument"}

    def test_register_validation(self, client: TestClient):
        response = client.post("/api/auth/register", json={
            "name": "X", "email": "not-an-email", "password": "secret1",
        })
        assert response.status_code == 422

    def test_login(self, client: TestClient, student_user):
        response = client.post("/api/auth/login", json={
            "email": student_user.email, "password": "password123",
        })
        assert response.status_code == 200
        assert response.json()["user"]["id"] == student_user.id

    def test_login_wrong_password(self, client: TestClient, student_user):
        response = client.post("/api/auth/login", json={
            "email": student_user.email, "password": "nope",
        })
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_google_verify(self, client: TestClient):
        identity = GoogleIdentity(email="g@campus.edu", name="Gina", sub="1")
        with patch("campus_hub.services.user_service.GoogleTokenVerifier") as verifier_cls:
            verifier_cls.return_value.verify.return_value = identity
            response = client.post("/api/auth/google/verify", json={"credential": "id-token"})
        assert response.status_code == 200
        assert response.json()["user"]["provider"] == "google"


class TestBearer:

    def test_missing_token(self, client: TestClient):
        assert client.get("/api/auth/me").status_code == 401

    def test_garbage_token(self, client: TestClient):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    def test_expired_token(self, client: TestClient, student_user):
        token = create_access_token(student_user.id, student_user.email, student_user.roles,
                                    expires_delta=timedelta(minutes=-1))
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_disabled_user(self, client: TestClient, db_session, student_user, student_auth_headers):
        student_user.enabled = False
        db_session.commit()
        assert client.get("/api/auth/me", headers=student_auth_headers).status_code == 401


class TestUserAdministration:

    def test_list_users_admin_only(self, client: TestClient, admin_auth_headers, student_auth_headers):
        assert client.get("/api/auth/users", headers=student_auth_headers).status_code == 403
        response = client.get("/api/auth/users", headers=admin_auth_headers)
        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_update_roles(self, client: TestClient, admin_auth_headers, student_user):
        response = client.put(f"/api/auth/users/{student_user.id}/roles",
                              json={"roles": ["technician"]}, headers=admin_auth_headers)
        assert response.status_code == 200
        assert response.json()["roles"] == ["technician"]

    def test_update_roles_unknown(self, client: TestClient, admin_auth_headers, student_user):
        response = client.put(f"/api/auth/users/{student_user.id}/roles",
                              json={"roles": ["wizard"]}, headers=admin_auth_headers)
        assert response.status_code == 400

    def test_disable_user(self, client: TestClient, admin_auth_headers, student_user):
        response = client.put(f"/api/auth/users/{student_user.id}/enabled",
                              json={"enabled": False}, headers=admin_auth_headers)
        assert response.status_code == 200
        assert response.json()["enabled"] is False


class TestRootEndpoints:

    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self, client: TestClient):
        assert client.get("/").status_code == 200
