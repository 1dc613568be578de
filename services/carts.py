from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from database import fetch_all, fetch_one
from errors import BadRequestError, NotFoundError
from logger import get_logger

logger = get_logger(__name__)

ACTIVE = "active"
ORDERED = "ordered"


def get_cart_items(conn: Connection, cart_id: int) -> List[Dict[str, Any]]:
    return fetch_all(
        conn,
        """
        SELECT ci.product_id, p.name, p.price, ci.quantity
        FROM cart_items ci
        JOIN products p ON p.id = ci.product_id
        WHERE ci.cart_id = :cart_id
        ORDER BY ci.id
        """,
        {"cart_id": cart_id},
    )


def get_cart(conn: Connection, user_id: int, cart_id: int) -> Optional[Dict[str, Any]]:
    cart = fetch_one(
        conn,
        "SELECT * FROM shopping_cart WHERE id = :id AND user_id = :user_id",
        {"id": cart_id, "user_id": user_id},
    )
    if cart is not None:
        cart["items"] = get_cart_items(conn, cart_id)
    return cart


def get_user_carts(conn: Connection, user_id: int) -> List[Dict[str, Any]]:
    carts = fetch_all(conn, "SELECT * FROM shopping_cart WHERE user_id = :user_id ORDER BY id", {"user_id": user_id})
    for cart in carts:
        cart["items"] = get_cart_items(conn, cart["id"])
    return carts


def create_cart(conn: Connection, user_id: int) -> Dict[str, Any]:
    try:
        result = conn.execute(
            text("INSERT INTO shopping_cart (user_id, status) VALUES (:user_id, :status)"),
            {"user_id": user_id, "status": ACTIVE},
        )
    except IntegrityError:
        # a token outlives the account it was issued for
        raise NotFoundError("User not found in database")
    logger.info(f"Created cart {result.lastrowid} for user {user_id}")
    return get_cart(conn, user_id, result.lastrowid)


def delete_cart(conn: Connection, user_id: int, cart_id: int) -> bool:
    result = conn.execute(
        text("DELETE FROM shopping_cart WHERE id = :id AND user_id = :user_id"),
        {"id": cart_id, "user_id": user_id},
    )
    return result.rowcount > 0


def _active_cart(conn: Connection, user_id: int, cart_id: int) -> Dict[str, Any]:
    cart = fetch_one(
        conn,
        "SELECT * FROM shopping_cart WHERE id = :id AND user_id = :user_id",
        {"id": cart_id, "user_id": user_id},
    )
    if cart is None:
        raise BadRequestError(f"Cart {cart_id} does not exist")
    if cart["status"] != ACTIVE:
        raise BadRequestError(f"Cart {cart_id} is no longer active")
    return cart


def add_cart_item(conn: Connection, user_id: int, cart_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
    """
    Put a product in the cart. Adding a product that is already there raises its quantity.
    """
    if quantity < 1:
        raise BadRequestError("Quantity must be at least 1")
    _active_cart(conn, user_id, cart_id)
    if fetch_one(conn, "SELECT id FROM products WHERE id = :id", {"id": product_id}) is None:
        raise BadRequestError(f"Product {product_id} does not exist")

    params = {"cart_id": cart_id, "product_id": product_id, "quantity": quantity}
    updated = conn.execute(
        text(
            "UPDATE cart_items SET quantity = quantity + :quantity "
            "WHERE cart_id = :cart_id AND product_id = :product_id"
        ),
        params,
    )
    if updated.rowcount == 0:
        conn.execute(
            text("INSERT INTO cart_items (cart_id, product_id, quantity) VALUES (:cart_id, :product_id, :quantity)"),
            params,
        )
    return get_cart(conn, user_id, cart_id)


def remove_cart_item(conn: Connection, user_id: int, cart_id: int, product_id: int) -> bool:
    _active_cart(conn, user_id, cart_id)
    result = conn.execute(
        text("DELETE FROM cart_items WHERE cart_id = :cart_id AND product_id = :product_id"),
        {"cart_id": cart_id, "product_id": product_id},
    )
    return result.rowcount > 0
