"""
Checkout: turn an active cart into an order.

Everything runs on the request connection, so a failure half way leaves no
order, no stock change and an untouched cart.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from database import fetch_all, fetch_one
from errors import BadRequestError
from logger import get_logger
from services.addresses import get_address
from services.carts import ACTIVE, ORDERED

logger = get_logger(__name__)


def _order_items(conn: Connection, order_id: int) -> List[Dict[str, Any]]:
    return fetch_all(
        conn,
        "SELECT product_id, quantity, unit_price FROM order_items WHERE order_id = :order_id ORDER BY id",
        {"order_id": order_id},
    )


def get_order(conn: Connection, user_id: int, order_id: int) -> Optional[Dict[str, Any]]:
    order = fetch_one(
        conn,
        "SELECT * FROM orders WHERE id = :id AND user_id = :user_id",
        {"id": order_id, "user_id": user_id},
    )
    if order is not None:
        order["items"] = _order_items(conn, order_id)
    return order


def get_user_orders(conn: Connection, user_id: int) -> List[Dict[str, Any]]:
    orders = fetch_all(conn, "SELECT * FROM orders WHERE user_id = :user_id ORDER BY id", {"user_id": user_id})
    for order in orders:
        order["items"] = _order_items(conn, order["id"])
    return orders


def place_order(conn: Connection, user_id: int, order: Dict[str, Any]) -> Dict[str, Any]:
    cart_id = order["cart_id"]
    cart = fetch_one(
        conn,
        "SELECT * FROM shopping_cart WHERE id = :id AND user_id = :user_id",
        {"id": cart_id, "user_id": user_id},
    )
    if cart is None:
        raise BadRequestError(f"Cart {cart_id} does not exist")
    if cart["status"] != ACTIVE:
        raise BadRequestError(f"Cart {cart_id} has already been ordered")

    shipping_address_id = order["shipping_address_id"]
    billing_address_id = order.get("billing_address_id") or shipping_address_id
    for address_id in {shipping_address_id, billing_address_id}:
        if get_address(conn, user_id, address_id) is None:
            raise BadRequestError(f"Address {address_id} does not exist")

    lines = fetch_all(
        conn,
        """
        SELECT ci.product_id, ci.quantity, p.name, p.price, p.stock
        FROM cart_items ci
        JOIN products p ON p.id = ci.product_id
        WHERE ci.cart_id = :cart_id
        ORDER BY ci.id
        """,
        {"cart_id": cart_id},
    )
    if not lines:
        raise BadRequestError("Cannot place an order with an empty cart")

    for line in lines:
        if line["quantity"] > line["stock"]:
            raise BadRequestError(f"Not enough stock for {line['name']!r}")

    total = round(sum(line["price"] * line["quantity"] for line in lines), 2)
    result = conn.execute(
        text(
            """
            INSERT INTO orders
            (user_id, cart_id, total_amount, shipping_address_id, billing_address_id, payment_method)
            VALUES (:user_id, :cart_id, :total_amount, :shipping_address_id, :billing_address_id, :payment_method)
            """
        ),
        {
            "user_id": user_id,
            "cart_id": cart_id,
            "total_amount": total,
            "shipping_address_id": shipping_address_id,
            "billing_address_id": billing_address_id,
            "payment_method": order.get("payment_method"),
        },
    )
    order_id = result.lastrowid

    for line in lines:
        conn.execute(
            text(
                "INSERT INTO order_items (order_id, product_id, quantity, unit_price) "
                "VALUES (:order_id, :product_id, :quantity, :unit_price)"
            ),
            {
                "order_id": order_id,
                "product_id": line["product_id"],
                "quantity": line["quantity"],
                "unit_price": line["price"],
            },
        )
        # stock may have moved since the check above; only decrement what is still there
        reserved = conn.execute(
            text("UPDATE products SET stock = stock - :quantity WHERE id = :id AND stock >= :quantity"),
            {"quantity": line["quantity"], "id": line["product_id"]},
        )
        if reserved.rowcount != 1:
            raise BadRequestError(f"Not enough stock for {line['name']!r}")

    conn.execute(
        text("UPDATE shopping_cart SET status = :status WHERE id = :id"),
        {"status": ORDERED, "id": cart_id},
    )

    logger.info(f"User {user_id} placed order {order_id} for {total}")
    return get_order(conn, user_id, order_id)
