# app/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from app.api.dependencies import get_order_service
from app.api.security import get_current_user
from app.domain.schemas import OrderOut, MessageOut
from app.services.auth_service import CurrentUser
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=List[OrderOut])
def list_orders(
    user: CurrentUser = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    """
    Zamowienia zalogowanego usera, najnowsze pierwsze.
    """
    return svc.list_orders(user.id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    return svc.get_order(user.id, order_id)


@router.delete("/{order_id}", response_model=MessageOut)
def delete_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    svc.delete_order(user.id, order_id)
    return {"message": "Order deleted"}
