from datetime import datetime, timedelta, timezone

from jose import jwt

from config import settings
from tests.conftest import DEFAULT_PASSWORD, bearer, create_user
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_access_token


def _login(client, email, password):
    return client.post("/login", json={"email": email, "password": password})


def test_password_hashing():
    hashed = get_password_hash("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret", "not-a-bcrypt-hash")


def test_login_issues_48_hour_token(client, admin_id):
    resp = _login(client, "admin@stocklab.co.id", DEFAULT_PASSWORD)

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["data"]["token_type"] == "bearer"

    claims = jwt.decode(body["data"]["token"], settings.SECRET_KEY, algorithms=["HS256"])
    assert claims["sub"] == str(admin_id)
    assert claims["role"] == "admin"
    assert claims["exp"] - claims["iat"] == 48 * 3600


def test_login_failures_look_the_same(client, admin_id):
    wrong_password = _login(client, "admin@stocklab.co.id", "nope")
    unknown_email = _login(client, "ghost@stocklab.co.id", DEFAULT_PASSWORD)

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"status": "error", "message": "Invalid credentials"}


def test_login_attempts_are_audited(client, admin_id, admin_headers):
    _login(client, "admin@stocklab.co.id", "nope")
    _login(client, "admin@stocklab.co.id", DEFAULT_PASSWORD)

    resp = client.get("/logs", params={"action": "LOGIN"}, headers=admin_headers)

    assert resp.status_code == 200
    items = resp.json()["data"]["items"]
    assert sorted(i["status"] for i in items) == ["FAIL", "SUCCESS"]
    assert all(i["user_id"] == admin_id for i in items)


def test_me_returns_caller(client, staff_id, staff_headers):
    resp = client.get("/me", headers=staff_headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["id"] == staff_id
    assert data["email"] == "staff@stocklab.co.id"
    assert "password_hash" not in data


def test_missing_header_is_401(client):
    resp = client.get("/me")

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid authorization header"


def test_non_bearer_scheme_is_401(client, admin_id):
    token = create_access_token(admin_id, role="admin")
    assert client.get("/me", headers={"Authorization": f"Token {token}"}).status_code == 401
    assert client.get("/me", headers={"Authorization": token}).status_code == 401


def test_malformed_token_is_401(client, admin_id):
    assert client.get("/me", headers={"Authorization": "Bearer not.a.jwt"}).status_code == 401


def test_expired_token_is_401(client, admin_id):
    token = create_access_token(admin_id, role="admin", expires_delta=timedelta(minutes=-1))
    assert client.get("/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_other_algorithm_is_rejected(client, admin_id):
    now = datetime.now(timezone.utc)
    claims = {"sub": str(admin_id), "role": "admin", "iat": now, "exp": now + timedelta(hours=1)}
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm="HS512")

    assert client.get("/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_wrong_secret_is_rejected(client, admin_id):
    now = datetime.now(timezone.utc)
    claims = {"sub": str(admin_id), "iat": now, "exp": now + timedelta(hours=1)}
    token = jwt.encode(claims, "some-other-secret", algorithm="HS256")

    assert client.get("/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_non_numeric_subject_is_rejected(client, admin_id):
    now = datetime.now(timezone.utc)
    claims = {"sub": "admin", "iat": now, "exp": now + timedelta(hours=1)}
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm="HS256")

    assert client.get("/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_token_for_unknown_user_is_401(client):
    assert client.get("/me", headers=bearer(4242)).status_code == 401


def test_staff_cannot_read_logs(client, staff_headers):
    resp = client.get("/logs", headers=staff_headers)

    assert resp.status_code == 403
    assert resp.json() == {"status": "error", "message": "Forbidden"}


def test_new_user_can_log_in(client, database):
    create_user(database, email="new@stocklab.co.id", password="pw", role="staff", name="New")

    assert _login(client, "new@stocklab.co.id", "pw").status_code == 200
