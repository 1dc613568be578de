from datetime import timedelta

import pytest
from jose import jwt

from errors import ForbiddenError, UnauthorizedError
from security import (
    Principal,
    authenticate,
    authorize_admin,
    authorize_self,
    create_access_token,
    decode_access_token,
    hash_password,
    token_for_user,
    verify_password,
)

USER_ROW = {"id": 1, "first_name": "Test", "last_name": "User", "email": "test@user.com", "role": "user"}


def test_password_hash_round_trip():
    hashed = hash_password("TestPassword1#")
    assert hashed != "TestPassword1#"
    assert verify_password("TestPassword1#", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_against_garbage_hash():
    assert verify_password("TestPassword1#", "not-a-hash") is False


def test_token_carries_principal_claims():
    principal = decode_access_token(token_for_user(USER_ROW))
    assert principal == Principal(id=1, name="Test User", email="test@user.com", role="user")


def test_expired_token_is_unauthorized():
    token = create_access_token({"sub": "1", "name": "x", "email": "x@y.com", "role": "user"}, timedelta(seconds=-5))
    with pytest.raises(UnauthorizedError):
        decode_access_token(token)


def test_token_signed_with_other_key_is_unauthorized():
    token = jwt.encode({"sub": "1", "name": "x", "email": "x@y.com", "role": "admin"}, "other-key", algorithm="HS256")
    with pytest.raises(UnauthorizedError):
        authenticate(token)


def test_token_missing_claims_is_unauthorized():
    with pytest.raises(UnauthorizedError):
        decode_access_token(create_access_token({"sub": "1"}))


def test_missing_token_is_unauthorized():
    with pytest.raises(UnauthorizedError):
        authenticate(None)
    with pytest.raises(UnauthorizedError):
        authenticate("")


def test_authorize_self():
    principal = Principal(id=1, name="Test User", email="test@user.com", role="user")
    assert authorize_self(principal, "1") is principal
    assert authorize_self(principal, 1) is principal
    with pytest.raises(ForbiddenError):
        authorize_self(principal, "2")
    with pytest.raises(ForbiddenError):
        authorize_self(principal, None)


def test_authorize_admin():
    admin = Principal(id=2, name="Test Admin", email="test@admin.com", role="admin")
    user = Principal(id=1, name="Test User", email="test@user.com", role="user")
    assert authorize_admin(admin) is admin
    with pytest.raises(ForbiddenError):
        authorize_admin(user)


def test_login_sets_session_cookie(client):
    response = client.post("/login", json={"email": "test@user.com", "password": "TestPassword1#"})
    assert response.status_code == 200
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("access_token=")
    assert "HttpOnly" in cookie
    assert "Secure" in cookie
    assert "Max-Age=86400" in cookie
    assert "Path=/" in cookie


def test_logout_clears_cookie(client):
    response = client.post("/logout")
    assert response.status_code == 200
    assert response.json() == {"message": "Logout successful"}
    assert 'access_token=""' in response.headers["set-cookie"]
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_token_still_valid_after_logout(client, user_headers):
    client.post("/logout", headers=user_headers)
    assert client.get("/users/1", headers=user_headers).status_code == 200


def test_tampered_cookie_is_unauthorized(client, user_headers):
    response = client.get("/users/1", headers={"cookie": user_headers["cookie"] + "x"})
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"
