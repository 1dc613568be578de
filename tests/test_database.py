import pytest
from sqlalchemy import text

from database import build_update, pick_fields
from errors import BadRequestError
from seed import seed_database

FIELDS = ("name", "description", "price", "category_id", "stock")


def test_pick_fields_keeps_declared_order():
    picked = pick_fields(FIELDS, {"stock": 3, "name": "Pen", "price": 1.5})
    assert list(picked) == ["name", "price", "stock"]


def test_pick_fields_skips_none_blank_and_unknown():
    picked = pick_fields(FIELDS, {"name": "  ", "description": None, "stock": 0, "color": "red"})
    assert picked == {"stock": 0}


def test_pick_fields_rejects_empty_update():
    with pytest.raises(BadRequestError, match="No fields provided for update"):
        pick_fields(FIELDS, {})
    with pytest.raises(BadRequestError):
        pick_fields(FIELDS, {"name": None, "description": ""})


def test_build_update_sql_and_params():
    sql, params = build_update("products", {"name": "Pen", "price": 2.0}, {"id": 7})
    assert sql == "UPDATE products SET name = :name, price = :price WHERE id = :where_id"
    assert params == {"name": "Pen", "price": 2.0, "where_id": 7}


def test_build_update_with_ownership_condition():
    sql, params = build_update("addresses", {"city": "Porto"}, {"id": 3, "user_id": 1})
    assert sql.endswith("WHERE id = :where_id AND user_id = :where_user_id")
    assert params == {"city": "Porto", "where_id": 3, "where_user_id": 1}


def test_build_update_rejects_no_changes():
    with pytest.raises(BadRequestError):
        build_update("users", {}, {"id": 1})


def test_seed_only_fills_an_empty_catalog(conn):
    assert seed_database(conn) == {"categories": 0, "products": 0}

    conn.execute(text("DELETE FROM products"))
    assert seed_database(conn) == {"categories": 0, "products": 4}
