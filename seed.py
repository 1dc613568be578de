from typing import Dict

from sqlalchemy import text
from sqlalchemy.engine import Connection

from database import fetch_one
from logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORIES = ["Basic", "Premium"]

SAMPLE_PRODUCTS = [
    {
        "name": "Simple Pen",
        "description": "A simple ballpoint pen",
        "price": 1.99,
        "category": "Basic",
        "stock": 100,
        "image_path": "/img/simple-pen.jpg",
    },
    {
        "name": "Gel Pen",
        "description": "Smooth gel ink, 0.5 mm",
        "price": 2.49,
        "category": "Basic",
        "stock": 80,
        "image_path": "/img/gel-pen.jpg",
    },
    {
        "name": "Premium Fountain Pen",
        "description": "Gold nib fountain pen with converter",
        "price": 89.0,
        "category": "Premium",
        "stock": 10,
        "image_path": "/img/fountain-pen.jpg",
    },
    {
        "name": "Leather Notebook",
        "description": "A5 dotted notebook, leather cover",
        "price": 24.5,
        "category": "Premium",
        "stock": 30,
        "image_path": "/img/notebook.jpg",
    },
]


def seed_database(conn: Connection) -> Dict[str, int]:
    """
    Insert the default categories and sample products if the catalog is empty.
    Returns how many rows of each kind were inserted.
    """
    inserted = {"categories": 0, "products": 0}

    for name in DEFAULT_CATEGORIES:
        if fetch_one(conn, "SELECT id FROM categories WHERE name = :name", {"name": name}) is None:
            conn.execute(text("INSERT INTO categories (name) VALUES (:name)"), {"name": name})
            inserted["categories"] += 1

    if fetch_one(conn, "SELECT COUNT(*) AS total FROM products")["total"] == 0:
        for product in SAMPLE_PRODUCTS:
            conn.execute(
                text(
                    """
                    INSERT INTO products (name, description, price, category_id, stock, image_path)
                    SELECT :name, :description, :price, id, :stock, :image_path
                    FROM categories WHERE name = :category
                    """
                ),
                product,
            )
            inserted["products"] += 1

    logger.info(f"Seeded {inserted['categories']} categories and {inserted['products']} products")
    return inserted
