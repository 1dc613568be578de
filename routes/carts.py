from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.engine import Connection

from database import get_db
from errors import NotFoundError
from schemas import CartItemCreate, CartOut
from security import require_self
from services import carts as cart_service

# every cart route is scoped to the user in the path
router = APIRouter(prefix="/cart", tags=["carts"], dependencies=[Depends(require_self)])

CART_NOT_FOUND = "Request successful, but no cart was found"


@router.get("/{id}", response_model=List[CartOut])
def list_carts(id: int, conn: Connection = Depends(get_db)):
    carts = cart_service.get_user_carts(conn, id)
    if not carts:
        raise NotFoundError("No carts for specified user found in database")
    return carts


@router.post("/{id}", status_code=201, response_model=CartOut)
def create_cart(id: int, conn: Connection = Depends(get_db)):
    return cart_service.create_cart(conn, id)


@router.get("/{id}/{cart_id}", response_model=CartOut)
def get_cart(id: int, cart_id: int, conn: Connection = Depends(get_db)):
    cart = cart_service.get_cart(conn, id, cart_id)
    if cart is None:
        raise NotFoundError(CART_NOT_FOUND)
    return cart


@router.delete("/{id}/{cart_id}", status_code=204)
def delete_cart(id: int, cart_id: int, conn: Connection = Depends(get_db)):
    if not cart_service.delete_cart(conn, id, cart_id):
        raise NotFoundError("Request successful, but no user shopping cart found to delete.")
    return Response(status_code=204)


@router.post("/{id}/{cart_id}/items", status_code=201, response_model=CartOut)
def add_item(id: int, cart_id: int, item: CartItemCreate, conn: Connection = Depends(get_db)):
    return cart_service.add_cart_item(conn, id, cart_id, item.product_id, item.quantity)


@router.delete("/{id}/{cart_id}/items/{product_id}", status_code=204)
def remove_item(id: int, cart_id: int, product_id: int, conn: Connection = Depends(get_db)):
    if not cart_service.remove_cart_item(conn, id, cart_id, product_id):
        raise NotFoundError("Product is not in this cart")
    return Response(status_code=204)
