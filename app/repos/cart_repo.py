# app/repos/cart_repo.py
from datetime import datetime, timezone
from typing import List, Tuple

from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    # carts
    def get_cart_by_user(self, user_id: int, for_update: bool = False) -> CartModel | None:
        stmt = select(CartModel).where(CartModel.user_id == user_id)
        if for_update:
            # row lock na koszyk (postgres), sqlite ignoruje
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def touch_cart(self, cart_id: int) -> None:
        self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id)
            .values(updated_at=datetime.now(timezone.utc))
        )

    # items
    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
            # bulk UPDATE omija identity map, wiec odswiezamy obiekt
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_cart_items(self, cart_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            ).scalars().all()
        )

    def get_cart_items_with_products(self, cart_id: int) -> List[Tuple[CartItemModel, ProductModel]]:
        rows = self.db.execute(
            select(CartItemModel, ProductModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.id)
        ).all()
        return [(item, product) for item, product in rows]

    def increment_item_quantity(self, cart_id: int, product_id: int, quantity: int) -> int:
        # atomowy UPDATE quantity = quantity + n, bez read-modify-write w pythonie
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
            .values(
                quantity=CartItemModel.quantity + quantity,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def set_item_quantity(self, item: CartItemModel, quantity: int) -> CartItemModel:
        item.quantity = quantity
        item.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return item

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def clear_cart(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.cart_id == cart_id)
        )
        return result.rowcount

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
