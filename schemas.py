"""
Request and response models for the PenPal Market API.

Rows come back from the database as plain dicts; the *Out models describe
what is sent to clients (passwords never are). Update models keep every field
optional so that a request can carry any subset of them.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


# Users
class UserCreate(BaseModel):
    first_name: str = Field(..., min_length=1, description="Given name")
    last_name: str = Field(..., min_length=1, description="Family name")
    email: EmailStr = Field(..., description="Email address, unique")
    password: str = Field(..., description="Plain password, hashed before storage")
    phone_number: Optional[str] = Field(None, description="Phone number, unique")


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    message: str = "Login successful"
    accessToken: str


# Addresses
class AddressCreate(BaseModel):
    address_line1: str = Field(..., min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: Optional[str] = None
    country: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)


class AddressUpdate(BaseModel):
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None


class AddressOut(BaseModel):
    id: int
    user_id: int
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    country: str
    postal_code: str


# Catalog
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)


class CategoryOut(BaseModel):
    id: int
    name: str


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: str = Field(..., description="Category name")
    stock: int = Field(0, ge=0)
    image_path: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, description="Category name")
    stock: Optional[int] = Field(None, ge=0)
    image_path: Optional[str] = None


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    category: str
    stock: int
    image_path: Optional[str] = None


# Carts
class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)


class CartItemOut(BaseModel):
    product_id: int
    name: str
    price: float
    quantity: int


class CartOut(BaseModel):
    id: int
    user_id: int
    status: str
    created_at: Optional[datetime] = None
    items: List[CartItemOut] = []


# Orders
class OrderCreate(BaseModel):
    cart_id: int
    shipping_address_id: int
    billing_address_id: Optional[int] = Field(None, description="Defaults to the shipping address")
    payment_method: Optional[str] = None


class OrderItemOut(BaseModel):
    product_id: Optional[int] = None
    quantity: int
    unit_price: float


class OrderOut(BaseModel):
    id: int
    user_id: int
    cart_id: Optional[int] = None
    total_amount: float
    shipping_address_id: Optional[int] = None
    billing_address_id: Optional[int] = None
    order_status: str
    payment_status: str
    payment_method: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    items: List[OrderItemOut] = []
