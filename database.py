import threading
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    event,
    func,
    text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

from config import settings
from errors import BadRequestError
from logger import get_logger

logger = get_logger(__name__)


# ──────────────────────────────────────────────
# Tables
# ──────────────────────────────────────────────
metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("phone_number", String(32), unique=True),
    Column("password", String(255), nullable=False),
    Column("role", String(20), nullable=False, server_default="user"),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)

addresses = Table(
    "addresses",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("address_line1", String(255), nullable=False),
    Column("address_line2", String(255)),
    Column("city", String(100), nullable=False),
    Column("state", String(100)),
    Column("country", String(100), nullable=False),
    Column("postal_code", String(20), nullable=False),
)

categories = Table(
    "categories",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(100), nullable=False, unique=True),
)

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("price", Float, nullable=False),
    Column("category_id", Integer, ForeignKey("categories.id"), nullable=False),
    Column("stock", Integer, nullable=False, server_default="0"),
    Column("image_path", String(500)),
)

carts = Table(
    "shopping_cart",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)

cart_items = Table(
    "cart_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("cart_id", Integer, ForeignKey("shopping_cart.id", ondelete="CASCADE"), nullable=False),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
    Column("quantity", Integer, nullable=False),
    UniqueConstraint("cart_id", "product_id"),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("cart_id", Integer, ForeignKey("shopping_cart.id", ondelete="SET NULL")),
    Column("total_amount", Float, nullable=False),
    Column("shipping_address_id", Integer, ForeignKey("addresses.id", ondelete="SET NULL")),
    Column("billing_address_id", Integer, ForeignKey("addresses.id", ondelete="SET NULL")),
    Column("order_status", String(20), nullable=False, server_default="pending"),
    Column("payment_status", String(20), nullable=False, server_default="unpaid"),
    Column("payment_method", String(50)),
    Column("paid_at", DateTime),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)

order_items = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("order_id", Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="SET NULL")),
    Column("quantity", Integer, nullable=False),
    Column("unit_price", Float, nullable=False),
)


# ──────────────────────────────────────────────
# Custom Exceptions
# ──────────────────────────────────────────────
class DatabaseConnectionError(Exception):
    """Raised when the engine is used before Database.connect()."""


# ──────────────────────────────────────────────
# Database Class
# ──────────────────────────────────────────────
def _engine_options(url: str) -> Dict[str, Any]:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # an in-memory database lives and dies with its single connection
        options["poolclass"] = StaticPool
    return options


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Process-wide holder of the SQLAlchemy engine.
    """

    _engine: ClassVar[Optional[Engine]] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def connect(cls, url: Optional[str] = None) -> Engine:
        """
        Create the engine and the tables. Calling it again while connected is a no-op.
        """
        with cls._lock:
            if cls._engine is not None:
                return cls._engine

            url = url or settings.database_url
            engine = create_engine(url, **_engine_options(url))
            if engine.dialect.name == "sqlite":
                event.listen(engine, "connect", _enable_sqlite_foreign_keys)

            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                metadata.create_all(engine)
            except Exception as e:
                logger.exception("Failed to connect to the database.")
                engine.dispose()
                raise DatabaseConnectionError(str(e)) from e

            cls._engine = engine
            logger.info(f"Connected to database → {engine.url.render_as_string(hide_password=True)}")
            return engine

    @classmethod
    def disconnect(cls) -> None:
        with cls._lock:
            if cls._engine is not None:
                cls._engine.dispose()
                cls._engine = None
                logger.info("Disconnected from database.")

    @classmethod
    def get_engine(cls) -> Engine:
        if cls._engine is None:
            raise DatabaseConnectionError("Database engine not connected.")
        return cls._engine


def get_db() -> Iterator[Connection]:
    """
    Request-scoped connection. Commits when the handler returns, rolls back if it raises.
    """
    with Database.get_engine().begin() as conn:
        yield conn


# ──────────────────────────────────────────────
# Query helpers
# ──────────────────────────────────────────────
def fetch_one(conn: Connection, sql: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    row = conn.execute(text(sql), params or {}).mappings().first()
    return dict(row) if row is not None else None


def fetch_all(conn: Connection, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [dict(row) for row in conn.execute(text(sql), params or {}).mappings()]


def pick_fields(fields: Sequence[str], values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keep the updatable fields that were actually supplied, in declared order.

    ``None`` and blank strings count as not supplied. Raises BadRequestError
    when nothing is left, so an empty update never reaches the database.
    """
    picked = {}
    for field in fields:
        value = values.get(field)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        picked[field] = value
    if not picked:
        raise BadRequestError("No fields provided for update")
    return picked


def build_update(table: str, changes: Dict[str, Any], where: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Assemble ``UPDATE <table> SET a = :a, ... WHERE id = :where_id [AND ...]``.

    ``changes`` is expected to come from pick_fields; its order is kept.
    Where-parameters are prefixed so they never clash with a SET column.
    """
    if not changes:
        raise BadRequestError("No fields provided for update")

    assignments = [f"{column} = :{column}" for column in changes]
    params = dict(changes)

    conditions = []
    for column, value in where.items():
        key = f"where_{column}"
        conditions.append(f"{column} = :{key}")
        params[key] = value

    sql = f"UPDATE {table} SET {', '.join(assignments)} WHERE {' AND '.join(conditions)}"
    return sql, params
