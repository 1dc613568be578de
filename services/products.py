from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from database import build_update, fetch_all, fetch_one, pick_fields
from errors import BadRequestError
from logger import get_logger

logger = get_logger(__name__)

# declared SET order for partial updates
PRODUCT_FIELDS = ("name", "description", "price", "category_id", "stock", "image_path")

PRODUCT_SELECT = """
    SELECT p.id, p.name, p.description, p.price, c.name AS category, p.stock, p.image_path
    FROM products p
    JOIN categories c ON c.id = p.category_id
"""


# Categories

def get_all_categories(conn: Connection) -> List[Dict[str, Any]]:
    return fetch_all(conn, "SELECT id, name FROM categories ORDER BY name")


def create_category(conn: Connection, name: str) -> Dict[str, Any]:
    name = name.strip()
    if not name:
        raise BadRequestError("Category name must not be empty")
    try:
        result = conn.execute(text("INSERT INTO categories (name) VALUES (:name)"), {"name": name})
    except IntegrityError:
        raise BadRequestError(f'Category "{name}" already exists')
    logger.info(f"Created category {name!r}")
    return {"id": result.lastrowid, "name": name}


def resolve_category(conn: Connection, name: str) -> int:
    """Map a category name to its id."""
    row = fetch_one(conn, "SELECT id FROM categories WHERE name = :name", {"name": name})
    if row is None:
        raise BadRequestError(f'Unknown category "{name}"')
    return row["id"]


# Products

def get_all_products(conn: Connection) -> List[Dict[str, Any]]:
    return fetch_all(conn, PRODUCT_SELECT + " ORDER BY p.id")


def get_product_by_id(conn: Connection, product_id: int) -> Optional[Dict[str, Any]]:
    return fetch_one(conn, PRODUCT_SELECT + " WHERE p.id = :id", {"id": product_id})


def escape_like(term: str) -> str:
    """Make LIKE wildcards in a search term match literally (escape character is !)."""
    return term.replace("!", "!!").replace("%", "!%").replace("_", "!_")


def get_products_by_name(conn: Connection, name: str) -> List[Dict[str, Any]]:
    return fetch_all(
        conn,
        PRODUCT_SELECT + " WHERE p.name LIKE :pattern ESCAPE '!' ORDER BY p.id",
        {"pattern": f"%{escape_like(name)}%"},
    )


def create_product(conn: Connection, product: Dict[str, Any]) -> Dict[str, Any]:
    for field in ("name", "price", "category"):
        if product.get(field) in (None, ""):
            raise BadRequestError("Name, price and category must be provided.")

    params = {
        "name": product["name"],
        "description": product.get("description"),
        "price": product["price"],
        "category_id": resolve_category(conn, product["category"]),
        "stock": product.get("stock") or 0,
        "image_path": product.get("image_path"),
    }
    result = conn.execute(
        text(
            """
            INSERT INTO products (name, description, price, category_id, stock, image_path)
            VALUES (:name, :description, :price, :category_id, :stock, :image_path)
            """
        ),
        params,
    )
    logger.info(f"Created product {result.lastrowid} ({params['name']!r})")
    return get_product_by_id(conn, result.lastrowid)


def update_product(conn: Connection, product_id: int, product: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Apply a partial update and return the stored product, or None when it does not exist.
    """
    values = dict(product)
    values["category_id"] = values.pop("category", None)
    changes = pick_fields(PRODUCT_FIELDS, values)

    if "category_id" in changes:
        changes["category_id"] = resolve_category(conn, changes["category_id"])

    sql, params = build_update("products", changes, {"id": product_id})
    conn.execute(text(sql), params)
    return get_product_by_id(conn, product_id)


def delete_product(conn: Connection, product_id: int) -> bool:
    result = conn.execute(text("DELETE FROM products WHERE id = :id"), {"id": product_id})
    if result.rowcount > 0:
        logger.info(f"Deleted product {product_id}")
    return result.rowcount > 0
