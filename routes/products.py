from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.engine import Connection

from database import get_db
from errors import NotFoundError
from schemas import CategoryCreate, CategoryOut, ProductCreate, ProductOut, ProductUpdate
from security import require_admin
from services import products as product_service

router = APIRouter(tags=["products"])

PRODUCT_NOT_FOUND = "Product not found in database"


@router.get("/products", response_model=List[ProductOut])
def list_products(conn: Connection = Depends(get_db)):
    return product_service.get_all_products(conn)


@router.get("/products/search/{name}", response_model=List[ProductOut])
def search_products(name: str, conn: Connection = Depends(get_db)):
    found = product_service.get_products_by_name(conn, name)
    if not found:
        raise NotFoundError(f'No products found with the name "{name}"')
    return found


@router.get("/products/{id}", response_model=ProductOut)
def get_product(id: int, conn: Connection = Depends(get_db)):
    product = product_service.get_product_by_id(conn, id)
    if product is None:
        raise NotFoundError(PRODUCT_NOT_FOUND)
    return product


@router.post("/products", status_code=201, response_model=ProductOut, dependencies=[Depends(require_admin)])
def create_product(product: ProductCreate, conn: Connection = Depends(get_db)):
    return product_service.create_product(conn, product.model_dump())


@router.put("/products/{id}", response_model=ProductOut, dependencies=[Depends(require_admin)])
def update_product(id: int, product: ProductUpdate, conn: Connection = Depends(get_db)):
    updated = product_service.update_product(conn, id, product.model_dump(exclude_none=True))
    if updated is None:
        raise NotFoundError(PRODUCT_NOT_FOUND)
    return updated


@router.delete("/products/{id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_product(id: int, conn: Connection = Depends(get_db)):
    if not product_service.delete_product(conn, id):
        raise NotFoundError(PRODUCT_NOT_FOUND)
    return Response(status_code=204)


# Categories
@router.get("/categories", response_model=List[CategoryOut])
def list_categories(conn: Connection = Depends(get_db)):
    return product_service.get_all_categories(conn)


@router.post("/categories", status_code=201, response_model=CategoryOut, dependencies=[Depends(require_admin)])
def create_category(category: CategoryCreate, conn: Connection = Depends(get_db)):
    return product_service.create_category(conn, category.name)
