# app/services/order_service.py
from typing import Dict, Any, List

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.domain.errors import NotFoundError
from app.repos.order_repo import OrderRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total": order.total,
        "created_at": order.created_at,
        "items": [
            {
                "product_id": i.product_id,
                "quantity": i.quantity,
                "unit_price": i.unit_price,
            }
            for i in order.items
        ],
    }


class OrderService:
    """
    Zapytania o zamowienia usera i usuwanie.
    Zamowienie innego usera traktujemy jak nieistniejace (404, nie 403),
    zeby nie zdradzac, ze dane ID istnieje.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_user_orders(user_id)]

    def get_order(self, user_id: int, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_user_order(order_id, user_id)
        if not order:
            raise NotFoundError("order")
        return order_to_dict(order)

    def delete_order(self, user_id: int, order_id: int) -> None:
        order = self.repo.get_user_order(order_id, user_id)
        if not order:
            raise NotFoundError("order")

        self.repo.delete_order(order)
        logger.info(f"Order {order_id} deleted by user {user_id}")
