from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Connection

from database import get_db
from errors import NotFoundError
from schemas import OrderCreate, OrderOut
from security import require_self
from services import orders as order_service

router = APIRouter(prefix="/orders", tags=["orders"], dependencies=[Depends(require_self)])


@router.post("/{id}", status_code=201, response_model=OrderOut)
def place_order(id: int, order: OrderCreate, conn: Connection = Depends(get_db)):
    return order_service.place_order(conn, id, order.model_dump())


@router.get("/{id}", response_model=List[OrderOut])
def list_orders(id: int, conn: Connection = Depends(get_db)):
    return order_service.get_user_orders(conn, id)


@router.get("/{id}/{order_id}", response_model=OrderOut)
def get_order(id: int, order_id: int, conn: Connection = Depends(get_db)):
    order = order_service.get_order(conn, id, order_id)
    if order is None:
        raise NotFoundError("Order not found in database")
    return order
