from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.errors import InternalError, NotFoundError, ValidationError
from app.repos.cart_repo import CartRepo
from app.services.lock_service import LockService
from app.services.product_catalog import ProductCatalog
from app.utils.logging import get_logger
from app.utils.settings import MAX_ITEM_QUANTITY

logger = get_logger(__name__)


def item_to_dict(item: CartItemModel) -> Dict[str, Any]:
    return {
        "id": item.id,
        "cart_id": item.cart_id,
        "product_id": item.product_id,
        "quantity": item.quantity,
        "updated_at": item.updated_at,
    }


class CartService:
    """
    Koszyk usera i jego pozycje.
    commands (add, set quantity, remove) ida pod lockiem koszyka i w jednej transakcji,
    query (list) tylko odczyt.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.db = db
        self.repo = CartRepo(db)
        self.catalog = ProductCatalog(db)
        self.lock_service = lock_service

    #query - odczyt
    def find_cart(self, user_id: int) -> CartModel | None:
        return self.repo.get_cart_by_user(user_id)

    def list_items(self, user_id: int) -> Dict[str, Any]:
        cart = self.find_cart(user_id)
        if not cart:
            return {"cart_id": None, "items": [], "total": Decimal("0.00")}

        rows = self.repo.get_cart_items_with_products(cart.id)

        # cena z katalogu tylko do wyswietlenia, checkout czyta ja od nowa
        items = [
            {
                "id": item.id,
                "product_id": product.id,
                "quantity": item.quantity,
                "name": product.name,
                "description": product.description,
                "price": product.price,
            }
            for item, product in rows
        ]
        total = sum((i["price"] * i["quantity"] for i in items), Decimal("0.00"))

        return {"cart_id": cart.id, "items": items, "total": total}

    #commands
    def get_or_create_cart(self, user_id: int) -> CartModel:
        existing = self.repo.get_cart_by_user(user_id)
        if existing:
            return existing

        try:
            created = self.repo.create_cart(
                CartModel(user_id=user_id, updated_at=datetime.now(timezone.utc))
            )
            logger.info(f"Created cart {created.id} for user {user_id}")
            return created
        except IntegrityError:
            # rownolegly insert wygral, unique na user_id
            self.repo.rollback()

        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            logger.error(f"Cart for user {user_id} could not be created")
            raise InternalError()
        return cart

    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValidationError("Quantity must be a positive integer")
        if quantity > MAX_ITEM_QUANTITY:
            raise ValidationError(f"Quantity must not exceed {MAX_ITEM_QUANTITY}")

        with self.lock_service.cart_lock(user_id):
            try:
                self.catalog.require_product(product_id)
                # limit sprawdzany zanim koszyk zostanie zapisany
                self._check_merged_quantity(user_id, product_id, quantity)
                cart = self.get_or_create_cart(user_id)
                cart_id = cart.id

                if self.repo.increment_item_quantity(cart_id, product_id, quantity):
                    logger.info(f"Product {product_id} already in cart {cart_id}, added {quantity}")
                else:
                    logger.info(f"Adding product {product_id} to cart {cart_id}")
                    self._insert_or_increment(cart_id, product_id, quantity)

                self.repo.touch_cart(cart_id)
                self.repo.commit()
            except (NotFoundError, ValidationError):
                self.repo.rollback()
                raise
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.exception(f"Failed to add product {product_id} for user {user_id}")
                raise InternalError() from e

            item = self.repo.get_cart_item(cart_id, product_id)

        return item_to_dict(item)

    def _check_merged_quantity(self, user_id: int, product_id: int, quantity: int) -> None:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            return
        item = self.repo.get_cart_item(cart.id, product_id)
        if item and item.quantity + quantity > MAX_ITEM_QUANTITY:
            raise ValidationError(f"Quantity must not exceed {MAX_ITEM_QUANTITY}")

    def _insert_or_increment(self, cart_id: int, product_id: int, quantity: int) -> None:
        try:
            with self.db.begin_nested():
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart_id,
                        product_id=product_id,
                        quantity=quantity,
                        updated_at=datetime.now(timezone.utc),
                    )
                )
        except IntegrityError:
            # wiersz pojawil sie miedzy UPDATE a INSERT
            self.repo.increment_item_quantity(cart_id, product_id, quantity)

    def set_item_quantity(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any] | None:
        if quantity < 0:
            raise ValidationError("Quantity must be 0 or greater")
        if quantity > MAX_ITEM_QUANTITY:
            raise ValidationError(f"Quantity must not exceed {MAX_ITEM_QUANTITY}")

        with self.lock_service.cart_lock(user_id):
            try:
                cart = self.repo.get_cart_by_user(user_id)
                if not cart:
                    raise NotFoundError("cart")

                item = self.repo.get_cart_item(cart.id, product_id)
                if not item:
                    raise NotFoundError("cart item")

                if quantity == 0:
                    # zero == usuniecie, nie trzymamy pozycji z iloscia 0
                    logger.info(f"Quantity 0, removing product {product_id} from cart {cart.id}")
                    self.repo.delete_cart_item(item)
                    result = None
                else:
                    logger.info(
                        f"Setting quantity of product {product_id} in cart {cart.id} "
                        f"from {item.quantity} to {quantity}"
                    )
                    result = item_to_dict(self.repo.set_item_quantity(item, quantity))

                self.repo.touch_cart(cart.id)
                self.repo.commit()
                return result
            except (NotFoundError, ValidationError):
                self.repo.rollback()
                raise
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.exception(f"Failed to update product {product_id} for user {user_id}")
                raise InternalError() from e

    def remove_item(self, user_id: int, product_id: int) -> None:
        with self.lock_service.cart_lock(user_id):
            try:
                cart = self.repo.get_cart_by_user(user_id)
                if not cart:
                    raise NotFoundError("cart")

                item = self.repo.get_cart_item(cart.id, product_id)
                if not item:
                    raise NotFoundError("cart item")

                logger.info(f"Removing product {product_id} from cart {cart.id}")
                self.repo.delete_cart_item(item)
                self.repo.touch_cart(cart.id)
                self.repo.commit()
            except (NotFoundError, ValidationError):
                self.repo.rollback()
                raise
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.exception(f"Failed to remove product {product_id} for user {user_id}")
                raise InternalError() from e
