from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.engine import Connection

from database import get_db
from errors import NotFoundError
from schemas import AddressCreate, AddressOut, AddressUpdate, UserCreate, UserOut, UserUpdate
from security import get_current_user, require_admin, require_self
from services import addresses as address_service
from services import users as user_service

router = APIRouter(tags=["users"])

USER_NOT_FOUND = "User not found in database"
ADDRESS_NOT_FOUND = "Address not found in database"


@router.post("/users", status_code=201, response_model=UserOut)
def register(user: UserCreate, conn: Connection = Depends(get_db)):
    return user_service.register_user(conn, user.model_dump())


@router.get("/users", response_model=List[UserOut], dependencies=[Depends(require_admin)])
def list_users(conn: Connection = Depends(get_db)):
    return user_service.get_all_users(conn)


# Addresses
@router.get("/users/addresses/{id}", response_model=List[AddressOut], dependencies=[Depends(require_self)])
def list_addresses(id: int, conn: Connection = Depends(get_db)):
    return address_service.get_user_addresses(conn, id)


@router.post("/users/addresses/{id}", status_code=201, dependencies=[Depends(require_self)])
def create_address(id: int, address: AddressCreate, conn: Connection = Depends(get_db)):
    new_address = address_service.create_address(conn, id, address.model_dump())
    return {"message": "Address created", "newAddress": AddressOut(**new_address)}


@router.put(
    "/users/{id}/addresses/{address_id}", response_model=AddressOut, dependencies=[Depends(require_self)]
)
def update_address(id: int, address_id: int, address: AddressUpdate, conn: Connection = Depends(get_db)):
    updated = address_service.update_address(conn, id, address_id, address.model_dump(exclude_none=True))
    if updated is None:
        raise NotFoundError(ADDRESS_NOT_FOUND)
    return updated


@router.delete("/users/{id}/addresses/{address_id}", status_code=204, dependencies=[Depends(require_self)])
def delete_address(id: int, address_id: int, conn: Connection = Depends(get_db)):
    if not address_service.delete_address(conn, id, address_id):
        raise NotFoundError(ADDRESS_NOT_FOUND)
    return Response(status_code=204)


# Users
@router.get("/users/{id}", response_model=UserOut, dependencies=[Depends(get_current_user)])
def get_user(id: int, conn: Connection = Depends(get_db)):
    user = user_service.get_user_by_id(conn, id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return user


@router.put("/users/{id}", response_model=UserOut, dependencies=[Depends(require_self)])
def update_user(id: int, user: UserUpdate, conn: Connection = Depends(get_db)):
    updated = user_service.update_user(conn, id, user.model_dump(exclude_none=True))
    if updated is None:
        raise NotFoundError(USER_NOT_FOUND)
    return updated


@router.delete("/users/{id}", status_code=204, dependencies=[Depends(require_self)])
def delete_user(id: int, conn: Connection = Depends(get_db)):
    if not user_service.delete_user(conn, id):
        raise NotFoundError(USER_NOT_FOUND)
    return Response(status_code=204)
