# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List, Literal
from decimal import Decimal
from datetime import datetime

from app.utils.settings import MAX_ITEM_QUANTITY


# auth / users

class RegisterIn(BaseModel):
    """Rejestracja uzytkownika."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginIn(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    role: Literal["user", "admin"]

    model_config = ConfigDict(from_attributes=True)


class UserUpdate(BaseModel):
    username: str | None = Field(None, min_length=3, max_length=50)
    email: EmailStr | None = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str
    user: UserRead


# katalog

class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


# koszyk

class ItemIn(BaseModel):
    """Dodanie produktu do koszyka."""

    product_id: int = Field(..., gt=0, strict=True, description="ID produktu (musi byc > 0)")
    quantity: int = Field(..., gt=0, le=MAX_ITEM_QUANTITY, strict=True, description="Ilosc produktu (musi byc > 0)")


class ItemQuantityIn(BaseModel):
    """Nowa ilosc, 0 usuwa pozycje."""

    product_id: int = Field(..., gt=0, strict=True)
    quantity: int = Field(..., ge=0, le=MAX_ITEM_QUANTITY, strict=True)


class ItemRefIn(BaseModel):
    product_id: int = Field(..., gt=0, strict=True)


class CartItemOut(BaseModel):
    id: int
    cart_id: int
    product_id: int
    quantity: int
    updated_at: datetime


class CartItemMessageOut(BaseModel):
    message: str
    item: CartItemOut | None = None


class CartLineOut(BaseModel):
    """Pozycja koszyka z aktualnymi danymi produktu (tylko do wyswietlenia)."""

    id: int
    product_id: int
    quantity: int
    name: str
    description: str
    price: Decimal


class CartOut(BaseModel):
    cart_id: int | None = None
    items: List[CartLineOut]
    total: Decimal
    message: str | None = None


class MessageOut(BaseModel):
    message: str


# zamowienia

class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: str
    total: Decimal
    created_at: datetime
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


class CheckoutOut(BaseModel):
    message: str
    order: OrderOut


class HealthOut(BaseModel):
    status: str
    database: str
