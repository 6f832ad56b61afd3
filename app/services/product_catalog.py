# app/services/product_catalog.py
from decimal import Decimal
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.domain.errors import NotFoundError, ValidationError
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ProductCatalog:
    """
    Katalog produktow. Dla koszyka i checkoutu tylko odczyt (get_product),
    zapis tylko przez endpointy admina.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def require_product(self, product_id: int) -> ProductModel:
        product = self.get_product(product_id)
        if not product:
            raise NotFoundError("product")
        return product

    def list_products(self) -> List[ProductModel]:
        return list(
            self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars().all()
        )

    @staticmethod
    def _validate(name: str, price: Decimal) -> None:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        if price is None or price <= 0:
            raise ValidationError("Price must be a positive number")

    def create_product(self, name: str, price: Decimal, description: str = "") -> ProductModel:
        self._validate(name, price)
        product = ProductModel(name=name.strip(), description=description or "", price=price)
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Product {product.id} created")
        return product

    def update_product(self, product_id: int, name: str, price: Decimal, description: str = "") -> ProductModel:
        self._validate(name, price)
        product = self.require_product(product_id)
        product.name = name.strip()
        product.description = description or ""
        product.price = price
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"Product {product_id} updated, price {price}")
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.require_product(product_id)
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Product {product_id} deleted")
