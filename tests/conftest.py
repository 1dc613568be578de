import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from database import Database
from main import app
from security import hash_password
from seed import seed_database

USER_CREDENTIALS = {"email": "test@user.com", "password": "TestPassword1#"}
ADMIN_CREDENTIALS = {"email": "test@admin.com", "password": "TestPassword2#"}

# bcrypt is slow on purpose; hash once per session
USER_HASH = hash_password(USER_CREDENTIALS["password"])
ADMIN_HASH = hash_password(ADMIN_CREDENTIALS["password"])


@pytest.fixture
def engine():
    """A fresh in-memory database per test with a user (id 1), an admin (id 2) and the sample catalog."""
    engine = Database.connect("sqlite://")
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                INSERT INTO users (id, first_name, last_name, role, phone_number, email, password)
                VALUES
                    (1, 'Test', 'User', 'user', '+351960000000', 'test@user.com', :user_hash),
                    (2, 'Test', 'Admin', 'admin', '+351920000000', 'test@admin.com', :admin_hash)
                """
            ),
            {"user_hash": USER_HASH, "admin_hash": ADMIN_HASH},
        )
        seed_database(conn)
    yield engine
    Database.disconnect()


@pytest.fixture
def conn(engine):
    with engine.begin() as connection:
        yield connection


@pytest.fixture
def client(engine):
    return TestClient(app)


def login(client, credentials):
    response = client.post("/login", json=credentials)
    assert response.status_code == 200
    return {"cookie": f"access_token={response.json()['accessToken']}"}


@pytest.fixture
def user_headers(client):
    return login(client, USER_CREDENTIALS)


@pytest.fixture
def admin_headers(client):
    return login(client, ADMIN_CREDENTIALS)
