# app/api/dependencies.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.services.cart_service import CartService
from app.services.checkout_service import CheckoutService
from app.services.lock_service import LockService
from app.services.order_service import OrderService


def get_lock_service(request: Request) -> LockService:
    return request.app.state.lock_service


def get_cart_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


def get_checkout_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CheckoutService:
    return CheckoutService(db=db, lock_service=lock_service)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)
