# app/services/checkout_service.py
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.domain.errors import InternalError, NotFoundError, ValidationError
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.services.lock_service import LockService
from app.services.order_service import order_to_dict
from app.services.product_catalog import ProductCatalog
from app.utils.retry import conflict_retry
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Zamiana koszyka na zamowienie.

    1. koszyk usera (row lock), brak -> 400
    2. pozycje koszyka, pusty -> 400
    3. aktualne ceny z katalogu (nigdy cena z listingu koszyka)
    4. total = suma cena * ilosc
    5. zamowienie ze statusem pending
    6. pozycje zamowienia, kopia (product_id, quantity, unit_price)
    7. czyszczenie pozycji koszyka, sam koszyk zostaje

    Wszystko w jednej transakcji pod lockiem koszyka. Blad w dowolnym kroku
    to rollback, koszyk zostaje taki jak przed wywolaniem.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.db = db
        self.cart_repo = CartRepo(db)
        self.order_repo = OrderRepo(db)
        self.catalog = ProductCatalog(db)
        self.lock_service = lock_service

    @conflict_retry()
    def checkout(self, user_id: int) -> Dict[str, Any]:
        with self.lock_service.cart_lock(user_id):
            try:
                order = self._convert_cart(user_id)
                self.db.commit()
            except Exception as e:
                # kazdy blad w transakcji to pelny rollback
                self.db.rollback()
                if isinstance(e, SQLAlchemyError):
                    logger.exception(f"Checkout failed for user {user_id}, rolled back")
                    raise InternalError() from e
                raise

        logger.info(f"Order {order.id} created for user {user_id}, total {order.total}")
        return order_to_dict(order)

    def _convert_cart(self, user_id: int) -> OrderModel:
        cart = self.cart_repo.get_cart_by_user(user_id, for_update=True)
        if not cart:
            raise ValidationError("No cart to check out")

        items = self.cart_repo.get_cart_items(cart.id)
        if not items:
            raise ValidationError("Cart is empty")

        total = Decimal("0.00")
        lines = []
        for item in items:
            product = self.catalog.get_product(item.product_id)
            if not product:
                logger.warning(f"Product {item.product_id} vanished during checkout of cart {cart.id}")
                raise NotFoundError("product")

            unit_price = Decimal(str(product.price))
            total += unit_price * item.quantity
            lines.append(
                OrderItemModel(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=unit_price,
                )
            )

        order = OrderModel(
            user_id=user_id,
            status="pending",
            total=total,
            items=lines,
        )
        self.order_repo.add_order(order)

        removed = self.cart_repo.clear_cart(cart.id)
        self.cart_repo.touch_cart(cart.id)

        logger.info(f"Cart {cart.id} converted to order {order.id}, {removed} items moved")
        return order
