# app/data/seed.py
import os
from decimal import Decimal

from app.data.database import Database
from app.data.models.product import ProductModel
from app.data.models.user import UserModel
from app.services.auth_service import AuthService
from app.utils.settings import DATABASE_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    {"name": "Keyboard", "description": "Mechanical keyboard", "price": Decimal("199.99")},
    {"name": "Mouse", "description": "Wireless mouse", "price": Decimal("49.50")},
    {"name": "Monitor", "description": "27 inch monitor", "price": Decimal("899.00")},
]


def seed(db: Database) -> None:
    session = db.session()
    try:
        # tylko gdy pusto
        if not session.query(ProductModel).first():
            session.add_all(ProductModel(**p) for p in PRODUCTS)
            session.commit()
            logger.info(f"Seeded {len(PRODUCTS)} products")

        if not session.query(UserModel).filter(UserModel.role == "admin").first():
            AuthService(session).register(
                username=os.getenv("ADMIN_USERNAME", "admin"),
                email=os.getenv("ADMIN_EMAIL", "admin@example.com"),
                password=os.getenv("ADMIN_PASSWORD", "admin123"),
                role="admin",
            )
            logger.info("Seeded admin account")
    finally:
        session.close()


if __name__ == "__main__":
    database = Database(DATABASE_URL)
    database.create_all()
    seed(database)
