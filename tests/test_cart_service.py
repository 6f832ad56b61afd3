"""Cart store and cart item ledger."""

from decimal import Decimal

import pytest

from app.data.models.cart import CartModel
from app.domain.errors import NotFoundError, ValidationError
from app.services.cart_service import CartService
from app.utils.settings import MAX_ITEM_QUANTITY


@pytest.fixture()
def service(session, lock_service):
    return CartService(db=session, lock_service=lock_service)


class TestGetOrCreateCart:
    def test_creates_cart_lazily(self, service, make_user, session):
        user = make_user()
        assert service.find_cart(user.id) is None

        cart = service.get_or_create_cart(user.id)

        assert cart.user_id == user.id
        assert session.query(CartModel).filter_by(user_id=user.id).count() == 1

    def test_returns_existing_cart(self, service, make_user, session):
        user = make_user()
        first = service.get_or_create_cart(user.id)
        second = service.get_or_create_cart(user.id)

        assert first.id == second.id
        assert session.query(CartModel).filter_by(user_id=user.id).count() == 1


class TestAddItem:
    def test_add_new_item(self, service, make_user, make_product):
        user = make_user()
        product = make_product()

        item = service.add_item(user.id, product.id, 2)

        assert item["product_id"] == product.id
        assert item["quantity"] == 2

    def test_adding_same_product_merges_quantities(self, service, make_user, make_product):
        user = make_user()
        product = make_product()

        service.add_item(user.id, product.id, 2)
        item = service.add_item(user.id, product.id, 5)

        assert item["quantity"] == 7
        cart = service.list_items(user.id)
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 7

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, service, make_user, make_product, quantity):
        user = make_user()
        product = make_product()

        with pytest.raises(ValidationError):
            service.add_item(user.id, product.id, quantity)

        assert service.find_cart(user.id) is None

    def test_unknown_product_is_not_found(self, service, make_user):
        user = make_user()

        with pytest.raises(NotFoundError) as exc:
            service.add_item(user.id, 999, 1)

        assert exc.value.what == "product"
        assert service.find_cart(user.id) is None

    @pytest.mark.parametrize("quantity", [MAX_ITEM_QUANTITY + 1, 2**63])
    def test_rejects_quantity_above_column_range(self, service, make_user, make_product, quantity):
        user = make_user()
        product = make_product()

        with pytest.raises(ValidationError):
            service.add_item(user.id, product.id, quantity)

        assert service.find_cart(user.id) is None

    def test_rejects_merge_above_column_range(self, service, make_user, make_product):
        user = make_user()
        product = make_product()
        service.add_item(user.id, product.id, MAX_ITEM_QUANTITY)

        with pytest.raises(ValidationError):
            service.add_item(user.id, product.id, 1)

        assert service.list_items(user.id)["items"][0]["quantity"] == MAX_ITEM_QUANTITY

    def test_bumps_cart_timestamp(self, service, make_user, make_product, session):
        user = make_user()
        product = make_product()
        service.add_item(user.id, product.id, 1)
        before = service.find_cart(user.id).updated_at

        service.add_item(user.id, product.id, 1)
        session.expire_all()

        assert service.find_cart(user.id).updated_at >= before


class TestSetItemQuantity:
    def test_overwrites_quantity(self, service, make_user, make_product):
        user = make_user()
        product = make_product()
        service.add_item(user.id, product.id, 2)

        item = service.set_item_quantity(user.id, product.id, 9)

        assert item["quantity"] == 9

    def test_zero_removes_item(self, service, make_user, make_product):
        user = make_user()
        keep = make_product(name="Keep")
        drop = make_product(name="Drop")
        service.add_item(user.id, keep.id, 1)
        service.add_item(user.id, drop.id, 3)

        assert service.set_item_quantity(user.id, drop.id, 0) is None

        product_ids = [i["product_id"] for i in service.list_items(user.id)["items"]]
        assert product_ids == [keep.id]

    def test_negative_quantity_rejected(self, service, make_user, make_product):
        user = make_user()
        product = make_product()
        service.add_item(user.id, product.id, 2)

        with pytest.raises(ValidationError):
            service.set_item_quantity(user.id, product.id, -1)

    def test_quantity_above_column_range_rejected(self, service, make_user, make_product):
        user = make_user()
        product = make_product()
        service.add_item(user.id, product.id, 2)

        with pytest.raises(ValidationError):
            service.set_item_quantity(user.id, product.id, MAX_ITEM_QUANTITY + 1)

        assert service.list_items(user.id)["items"][0]["quantity"] == 2

    def test_missing_cart(self, service, make_user, make_product):
        user = make_user()
        product = make_product()

        with pytest.raises(NotFoundError) as exc:
            service.set_item_quantity(user.id, product.id, 1)

        assert exc.value.what == "cart"

    def test_missing_item(self, service, make_user, make_product):
        user = make_user()
        in_cart = make_product(name="A")
        other = make_product(name="B")
        service.add_item(user.id, in_cart.id, 1)

        with pytest.raises(NotFoundError) as exc:
            service.set_item_quantity(user.id, other.id, 1)

        assert exc.value.what == "cart item"


class TestRemoveItem:
    def test_removes_item(self, service, make_user, make_product):
        user = make_user()
        product = make_product()
        service.add_item(user.id, product.id, 4)

        service.remove_item(user.id, product.id)

        assert service.list_items(user.id)["items"] == []

    def test_missing_item(self, service, make_user, make_product):
        user = make_user()
        product = make_product()
        service.get_or_create_cart(user.id)

        with pytest.raises(NotFoundError) as exc:
            service.remove_item(user.id, product.id)

        assert exc.value.what == "cart item"

    def test_missing_cart(self, service, make_user, make_product):
        user = make_user()
        product = make_product()

        with pytest.raises(NotFoundError) as exc:
            service.remove_item(user.id, product.id)

        assert exc.value.what == "cart"


class TestListItems:
    def test_no_cart_is_empty(self, service, make_user):
        user = make_user()

        cart = service.list_items(user.id)

        assert cart["cart_id"] is None
        assert cart["items"] == []
        assert cart["total"] == Decimal("0")

    def test_joins_live_product_data(self, service, make_user, make_product, session):
        user = make_user()
        product = make_product(name="Lamp", price="12.50", description="Desk lamp")
        service.add_item(user.id, product.id, 2)

        product.price = Decimal("15.00")
        session.commit()

        cart = service.list_items(user.id)
        line = cart["items"][0]
        assert line["name"] == "Lamp"
        assert line["description"] == "Desk lamp"
        assert line["price"] == Decimal("15.00")
        assert cart["total"] == Decimal("30.00")

    def test_carts_are_isolated_per_user(self, service, make_user, make_product):
        alice = make_user("alice")
        bob = make_user("bob")
        product = make_product()
        service.add_item(alice.id, product.id, 3)

        assert service.list_items(bob.id)["items"] == []
        with pytest.raises(NotFoundError):
            service.remove_item(bob.id, product.id)
        assert service.list_items(alice.id)["items"][0]["quantity"] == 3
