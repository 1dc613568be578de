from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from database import build_update, fetch_all, fetch_one, pick_fields
from errors import BadRequestError, NotFoundError

ADDRESS_FIELDS = ("address_line1", "address_line2", "city", "state", "country", "postal_code")
REQUIRED_FIELDS = ("address_line1", "city", "country", "postal_code")


def get_user_addresses(conn: Connection, user_id: int) -> List[Dict[str, Any]]:
    return fetch_all(conn, "SELECT * FROM addresses WHERE user_id = :user_id ORDER BY id", {"user_id": user_id})


def get_address(conn: Connection, user_id: int, address_id: int) -> Optional[Dict[str, Any]]:
    return fetch_one(
        conn,
        "SELECT * FROM addresses WHERE id = :id AND user_id = :user_id",
        {"id": address_id, "user_id": user_id},
    )


def create_address(conn: Connection, user_id: int, address: Dict[str, Any]) -> Dict[str, Any]:
    if not all(address.get(field) for field in REQUIRED_FIELDS):
        raise BadRequestError("Address line, city, country and postal code must be provided.")

    params = {field: address.get(field) for field in ADDRESS_FIELDS}
    params["user_id"] = user_id
    try:
        result = conn.execute(
            text(
                """
                INSERT INTO addresses
                (user_id, address_line1, address_line2, city, state, country, postal_code)
                VALUES (:user_id, :address_line1, :address_line2, :city, :state, :country, :postal_code)
                """
            ),
            params,
        )
    except IntegrityError:
        raise NotFoundError("User not found in database")
    return get_address(conn, user_id, result.lastrowid)


def update_address(
    conn: Connection, user_id: int, address_id: int, address: Dict[str, Any]
) -> Optional[Dict[str, Any]]:
    changes = pick_fields(ADDRESS_FIELDS, address)
    sql, params = build_update("addresses", changes, {"id": address_id, "user_id": user_id})
    conn.execute(text(sql), params)
    return get_address(conn, user_id, address_id)


def delete_address(conn: Connection, user_id: int, address_id: int) -> bool:
    result = conn.execute(
        text("DELETE FROM addresses WHERE id = :id AND user_id = :user_id"),
        {"id": address_id, "user_id": user_id},
    )
    return result.rowcount > 0
