import re
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from database import build_update, fetch_all, fetch_one, pick_fields
from errors import BadRequestError, UnauthorizedError
from logger import get_logger
from security import hash_password, verify_password

logger = get_logger(__name__)

# at least 8 characters with a lower, an upper, a digit and a symbol
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$")
PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9 ]{5,19}$")

USER_FIELDS = ("first_name", "last_name", "phone_number", "email", "password")

# never select the password hash for outward use
USER_SELECT = "SELECT id, first_name, last_name, email, phone_number, role, created_at FROM users"

DEFAULT_ROLE = "user"


def validate_password(password: str) -> None:
    if not PASSWORD_PATTERN.match(password):
        raise BadRequestError(
            "Password must be at least 8 characters long and contain an uppercase letter, "
            "a lowercase letter, a number and a symbol."
        )


def validate_phone_number(phone_number: str) -> None:
    if not PHONE_PATTERN.match(phone_number):
        raise BadRequestError("Invalid phone number format.")


def get_all_users(conn: Connection) -> List[Dict[str, Any]]:
    return fetch_all(conn, USER_SELECT + " ORDER BY id")


def get_user_by_id(conn: Connection, user_id: int) -> Optional[Dict[str, Any]]:
    return fetch_one(conn, USER_SELECT + " WHERE id = :id", {"id": user_id})


def register_user(conn: Connection, user: Dict[str, Any]) -> Dict[str, Any]:
    if not all(user.get(field) for field in ("first_name", "last_name", "email", "password")):
        raise BadRequestError("All required fields must be provided.")

    validate_password(user["password"])
    phone_number = user.get("phone_number") or None
    if phone_number is not None:
        validate_phone_number(phone_number)

    params = {
        "first_name": user["first_name"],
        "last_name": user["last_name"],
        "email": user["email"],
        "phone_number": phone_number,
        "password": hash_password(user["password"]),
        "role": DEFAULT_ROLE,
    }
    try:
        result = conn.execute(
            text(
                """
                INSERT INTO users (first_name, last_name, email, phone_number, password, role)
                VALUES (:first_name, :last_name, :email, :phone_number, :password, :role)
                """
            ),
            params,
        )
    except IntegrityError:
        # unique indexes on email and phone_number
        raise BadRequestError("A user with this email or phone number already exists.")

    logger.info(f"Registered user {result.lastrowid}")
    return get_user_by_id(conn, result.lastrowid)


def login_user(conn: Connection, email: str, password: str) -> Dict[str, Any]:
    """
    Check credentials and return the users row without its password.
    Unknown email and wrong password fail the same way.
    """
    user = fetch_one(conn, "SELECT * FROM users WHERE email = :email", {"email": email})
    if user is None or not verify_password(password, user["password"]):
        raise UnauthorizedError("Invalid credentials.")
    user.pop("password")
    return user


def update_user(conn: Connection, user_id: int, user: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    changes = pick_fields(USER_FIELDS, user)

    if "password" in changes:
        validate_password(changes["password"])
        changes["password"] = hash_password(changes["password"])
    if "phone_number" in changes:
        validate_phone_number(changes["phone_number"])

    sql, params = build_update("users", changes, {"id": user_id})
    try:
        conn.execute(text(sql), params)
    except IntegrityError:
        raise BadRequestError("A user with this email or phone number already exists.")
    return get_user_by_id(conn, user_id)


def delete_user(conn: Connection, user_id: int) -> bool:
    result = conn.execute(text("DELETE FROM users WHERE id = :id"), {"id": user_id})
    if result.rowcount > 0:
        logger.info(f"Deleted user {user_id}")
    return result.rowcount > 0
