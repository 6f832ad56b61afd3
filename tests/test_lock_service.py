"""Per-cart Redis lock."""

from unittest import mock

import pytest
from redis.exceptions import RedisError

from app.domain.errors import ConflictError
from app.services.lock_service import LockService, _RELEASE_LUA


@pytest.fixture()
def client():
    redis_client = mock.MagicMock()
    redis_client.set.return_value = True
    redis_client.eval.return_value = 1
    return redis_client


class TestCartLock:
    def test_key_is_scoped_to_one_cart(self):
        assert LockService.cart_key(7) == "cart:7:lock"
        assert LockService.cart_key(7) != LockService.cart_key(8)

    def test_acquire_and_release(self, client):
        service = LockService(client=client, ttl=30)

        with service.cart_lock(5) as token:
            client.set.assert_called_once_with(name="cart:5:lock", value=token, nx=True, ex=30)

        client.eval.assert_called_once_with(_RELEASE_LUA, 1, "cart:5:lock", token)

    def test_released_when_body_raises(self, client):
        service = LockService(client=client)

        with pytest.raises(ValueError):
            with service.cart_lock(5):
                raise ValueError("boom")

        client.eval.assert_called_once()

    def test_conflict_when_lock_is_held(self, client):
        client.set.return_value = None
        service = LockService(client=client, wait_seconds=0.1, poll_interval=0.02)

        with pytest.raises(ConflictError):
            with service.cart_lock(5):
                pytest.fail("lock body must not run")

        assert client.set.call_count > 1
        client.eval.assert_not_called()

    def test_waits_for_lock_to_be_released(self, client):
        client.set.side_effect = [None, None, True]
        service = LockService(client=client, wait_seconds=2, poll_interval=0.01)

        with service.cart_lock(5):
            pass

        assert client.set.call_count == 3

    def test_redis_errors_are_retried(self, client):
        client.set.side_effect = [RedisError("down"), True]
        service = LockService(client=client)

        assert service.acquire_cart_lock(5, "token") is True
        assert client.set.call_count == 2

    def test_other_carts_are_not_blocked(self, fake_redis):
        service = LockService(client=fake_redis, wait_seconds=0.1, poll_interval=0.02)

        with service.cart_lock(1):
            with service.cart_lock(2):
                pass

    def test_same_cart_is_exclusive(self, fake_redis):
        service = LockService(client=fake_redis, wait_seconds=0.1, poll_interval=0.02)

        with service.cart_lock(1):
            with pytest.raises(ConflictError):
                with service.cart_lock(1):
                    pass

        with service.cart_lock(1):
            pass

    def test_release_does_not_drop_foreign_token(self, fake_redis):
        service = LockService(client=fake_redis)
        fake_redis.set("cart:1:lock", "someone-else")

        assert service.release_cart_lock(1, "mine") is False
        assert fake_redis.get("cart:1:lock") == "someone-else"
