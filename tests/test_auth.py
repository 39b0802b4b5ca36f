from fastapi import status

from contact_manager import services
from contact_manager.auth import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
)
from contact_manager.schemas import UserCreate


def test_password_hashing_roundtrip():
    password = "secret123"
    hashed = get_password_hash(password)
    assert hashed != password
    assert verify_password(password, hashed)
    assert not verify_password("wrong", hashed)


def create_account(db_session, email="user@example.com", password="secret123", role="user"):
    user_in = UserCreate(name="Test User", email=email, password=password)
    return services.create_account(
        db_session, user_in, get_password_hash(password), role=role
    )


def login(client, email, password="secret123"):
    return client.post(
        "/auth/login",
        data={"username": email, "password": password},
        headers={"content-type": "application/x-www-form-urlencoded"},
    )


def test_register_login_and_me(client):
    register_resp = client.post(
        "/auth/register",
        json={"name": "Ann Lee", "email": "Ann@Example.com", "password": "secret123"},
    )
    assert register_resp.status_code == status.HTTP_201_CREATED
    body = register_resp.json()
    assert body["email"] == "ann@example.com"
    assert body["role"] == "user"
    assert "password" not in body and "hashed_password" not in body

    response = login(client, "ann@example.com")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert "access_token" in data and "refresh_token" in data

    me_resp = client.get(
        "/users/me",
        headers={"Authorization": f"Bearer {data['access_token']}"},
    )
    assert me_resp.status_code == status.HTTP_200_OK
    assert me_resp.json()["email"] == "ann@example.com"


def test_register_ignores_role(client):
    response = client.post(
        "/auth/register",
        json={
            "name": "Sneaky",
            "email": "sneaky@example.com",
            "password": "secret123",
            "role": "admin",
        },
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["role"] == "user"


def test_register_duplicate_email(client, db_session):
    create_account(db_session, email="dup@example.com")
    response = client.post(
        "/auth/register",
        json={"name": "Dup", "email": "DUP@example.com", "password": "secret123"},
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "CONFLICT"


def test_login_wrong_password(client, db_session):
    create_account(db_session, email="wrong@example.com")
    response = login(client, "wrong@example.com", "nope-nope")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_inactive_account(client, db_session):
    user = create_account(db_session, email="inactive@example.com")
    user.is_active = False
    db_session.commit()
    response = login(client, "inactive@example.com")
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_refresh_token_returns_new_pair(client, db_session):
    create_account(db_session, email="refresh@example.com")
    tokens = login(client, "refresh@example.com").json()
    refresh_resp = client.post(
        "/auth/refresh",
        json={"refresh_token": tokens["refresh_token"]},
    )
    assert refresh_resp.status_code == status.HTTP_200_OK
    assert refresh_resp.json()["access_token"] != ""


def test_refresh_rejects_access_token(client, db_session):
    user = create_account(db_session, email="scope@example.com")
    access = create_access_token({"sub": user.id})
    response = client.post("/auth/refresh", json={"refresh_token": access})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_refresh_token_cannot_authenticate(client, db_session):
    user = create_account(db_session, email="bearer@example.com")
    refresh = create_refresh_token({"sub": user.id})
    response = client.get("/contacts/", headers={"Authorization": f"Bearer {refresh}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_garbage_token_rejected(client):
    response = client.get("/contacts/", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
