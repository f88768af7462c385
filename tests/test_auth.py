"""
Authentication tests: registration, login, cookie and bearer auth, logout.
"""
import fencemark.api.deps as deps
import fencemark.api.endpoints.auth as auth_endpoints
from fencemark.config import get_settings
from fencemark.core.token_store import TokenRevocationStore, revoked_token_key
from fencemark.models.organization import MemberRole, OrganizationMember
from fencemark.models.user import User

from conftest import PASSWORD, bearer, register

settings = get_settings()


def test_register_creates_owner_membership(client, db_session):
    auth = register(client, "owner@acme-fencing.com", "Acme Fencing")

    assert auth["success"] is True
    assert auth["email"] == "owner@acme-fencing.com"
    assert auth["is_guest"] is True
    assert auth["organization_id"]
    assert auth["access_token"]

    membership = db_session.query(OrganizationMember).filter_by(user_id=auth["user_id"]).one()
    assert membership.organization_id == auth["organization_id"]
    assert membership.role == MemberRole.OWNER
    assert membership.is_accepted is True
    assert membership.joined_at is not None


def test_register_sets_http_only_cookie(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "owner@acme-fencing.com", "password": PASSWORD, "organization_name": "Acme Fencing"},
    )
    assert response.status_code == 200
    cookie_header = response.headers["set-cookie"]
    assert settings.AUTH_COOKIE_NAME in cookie_header
    assert "HttpOnly" in cookie_header


def test_register_duplicate_email(client):
    register(client, "owner@acme-fencing.com", "Acme Fencing")
    response = client.post(
        "/api/auth/register",
        json={"email": "Owner@Acme-Fencing.com", "password": PASSWORD, "organization_name": "Other"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "User already exists with this email"}


def test_register_validation_error_is_400(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "not-an-email", "password": "short", "organization_name": ""},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_login(client, org_a):
    response = client.post(
        "/api/auth/login",
        json={"email": "owner@acme-fencing.com", "password": PASSWORD},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == org_a["user_id"]
    assert body["organization_id"] == org_a["organization_id"]


def test_login_wrong_password_and_unknown_user_look_the_same(client, org_a):
    wrong_password = client.post(
        "/api/auth/login",
        json={"email": "owner@acme-fencing.com", "password": "not-the-password"},
    )
    unknown_user = client.post(
        "/api/auth/login",
        json={"email": "nobody@acme-fencing.com", "password": PASSWORD},
    )
    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()
    assert wrong_password.json()["error"] == "Invalid email or password"


def test_me_with_bearer_token(client, org_a, headers_a):
    response = client.get("/api/auth/me", headers=headers_a)
    assert response.status_code == 200
    assert response.json() == {
        "user_id": org_a["user_id"],
        "email": "owner@acme-fencing.com",
        "organization_id": org_a["organization_id"],
        "role": "Owner",
    }


def test_me_with_cookie(client):
    register(client, "owner@acme-fencing.com", "Acme Fencing")
    response = client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json()["email"] == "owner@acme-fencing.com"


def test_me_requires_authentication(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token_is_unauthenticated(client):
    response = client.get("/api/jobs", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_logout_revokes_token(client, org_a, headers_a, fake_redis, monkeypatch):
    store = TokenRevocationStore(fake_redis)
    monkeypatch.setattr(deps, "get_revocation_store", lambda: store)
    monkeypatch.setattr(auth_endpoints, "get_revocation_store", lambda: store)

    assert client.get("/api/jobs", headers=headers_a).status_code == 200

    response = client.post("/api/auth/logout", headers=headers_a)
    assert response.status_code == 200
    assert response.json()["success"] is True

    revoked = [key for key in fake_redis.store if key.startswith(revoked_token_key(""))]
    assert len(revoked) == 1
    assert fake_redis.ttls[revoked[0]] > 0

    assert client.get("/api/jobs", headers=headers_a).status_code == 401


def test_logout_without_redis_still_clears_cookie(client):
    register(client, "owner@acme-fencing.com", "Acme Fencing")
    response = client.post("/api/auth/logout")
    assert response.status_code == 200
    assert settings.AUTH_COOKIE_NAME in response.headers["set-cookie"]


def test_delete_account(client, org_a, headers_a, db_session):
    response = client.delete("/api/auth/account", headers=headers_a)
    assert response.status_code == 200

    assert db_session.query(User).filter_by(id=org_a["user_id"]).first() is None
    assert db_session.query(OrganizationMember).filter_by(user_id=org_a["user_id"]).count() == 0

    # Token still decodes, but the user is gone
    assert client.get("/api/auth/me", headers=bearer(org_a)).status_code == 401
