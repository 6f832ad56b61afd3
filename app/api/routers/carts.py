#app/api/routers/carts.py
from fastapi import APIRouter, Depends

from app.api.dependencies import get_cart_service, get_checkout_service
from app.api.security import get_current_user
from app.domain.schemas import (
    ItemIn,
    ItemQuantityIn,
    ItemRefIn,
    CartOut,
    CartItemMessageOut,
    CheckoutOut,
    MessageOut,
)
from app.services.auth_service import CurrentUser
from app.services.cart_service import CartService
from app.services.checkout_service import CheckoutService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.post("/add", response_model=CartItemMessageOut)
def add_item(
    payload: ItemIn,
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    item = svc.add_item(user.id, payload.product_id, payload.quantity)
    return {"message": "Product added to cart", "item": item}


@router.get("", response_model=CartOut)
def get_cart(
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.list_items(user.id)
    if not cart["items"]:
        cart["message"] = "Cart is empty"
    return cart


@router.put("/update", response_model=CartItemMessageOut)
def update_item(
    payload: ItemQuantityIn,
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    item = svc.set_item_quantity(user.id, payload.product_id, payload.quantity)
    if item is None:
        return {"message": "Product removed from cart", "item": None}
    return {"message": "Product quantity updated", "item": item}


@router.delete("/remove", response_model=MessageOut)
def remove_item(
    payload: ItemRefIn,
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    svc.remove_item(user.id, payload.product_id)
    return {"message": "Product removed from cart"}


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    user: CurrentUser = Depends(get_current_user),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Tworzy zamowienie z calego koszyka i czysci koszyk.
    """
    order = svc.checkout(user.id)
    return {"message": "Order created", "order": order}
