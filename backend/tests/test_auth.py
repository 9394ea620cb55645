"""
Tests for staff login and session-backed tokens
"""
from academy.models import AuthSession, AuthUser
from academy.routers.auth import hash_password, seed_staff_user


def _staff(db, username="staff1", password="s3cret-pass"):
    db.add(AuthUser(username=username, password_hash=hash_password(password), email="t@example.com", phone="010"))
    db.commit()
    return username, password


def _login(client, username, password):
    return client.post("/auth/token", data={"username": username, "password": password})


def test_login_creates_session_and_token_works(anonymous_client, db):
    username, password = _staff(db)

    response = _login(anonymous_client, username, password)

    assert response.status_code == 200
    token = response.json()["access_token"]
    assert db.query(AuthSession).filter(AuthSession.username == username).count() == 1
    me = anonymous_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json() == {"username": username}


def test_wrong_password_is_rejected(anonymous_client, db):
    username, _ = _staff(db)
    assert _login(anonymous_client, username, "nope").status_code == 401


def test_deleted_session_revokes_token(anonymous_client, db):
    username, password = _staff(db)
    token = _login(anonymous_client, username, password).json()["access_token"]

    db.query(AuthSession).delete()
    db.commit()

    response = anonymous_client.get("/surveys", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_garbage_token_is_rejected(anonymous_client):
    response = anonymous_client.get("/surveys", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


NEW_STAFF = {"username": "newstaff", "password": "pw123456", "email": "n@example.com", "phone": "010"}


def test_register_requires_login(anonymous_client):
    assert anonymous_client.post("/auth/register", json=NEW_STAFF).status_code == 401


def test_staff_can_register_accounts(client):
    body = NEW_STAFF
    assert client.post("/auth/register", json=body).status_code == 201
    assert client.post("/auth/register", json=body).status_code == 409


def test_short_password_is_rejected(client):
    body = {**NEW_STAFF, "username": "shortpw", "password": "abc"}
    assert client.post("/auth/register", json=body).status_code == 422


def test_logout_ends_session(anonymous_client, db):
    username, password = _staff(db)
    token = _login(anonymous_client, username, password).json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert anonymous_client.post("/auth/logout", headers=headers).status_code == 204
    assert anonymous_client.get("/auth/me", headers=headers).status_code == 401


def test_seed_account_is_created_once(db, monkeypatch):
    from academy.settings import settings

    monkeypatch.setattr(settings, "seed_username", "director")
    monkeypatch.setattr(settings, "seed_password_plain", "bootstrap-pass")

    assert seed_staff_user(db) is True
    assert seed_staff_user(db) is False
    assert db.get(AuthUser, "director") is not None
