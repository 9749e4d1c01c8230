import pytest

from storefront.data.models import OrderStatus
from storefront.domain.errors import ForbiddenError, InvalidStatusError, NotFoundError
from storefront.services.order_service import OrderService

from tests.conftest import PAYER


@pytest.fixture
def orders(db):
    return OrderService(db)


@pytest.fixture
def settled(fill_cart, gateway, settler):
    fill_cart(1, [(1, 1)])
    gateway.pay("ref-o1", 10000, PAYER)
    order, _ = settler.settle(1, "ref-o1")
    return order


def test_status_transitions(orders, settled):
    order = orders.update_status(settled["order_id"], OrderStatus.CANCELLED)
    assert order["status"] == "CANCELLED"

    order = orders.update_status(settled["order_id"], "PENDING")
    assert order["status"] == "PENDING"


def test_unknown_status_is_rejected(orders, settled):
    with pytest.raises(InvalidStatusError) as exc:
        orders.update_status(settled["order_id"], "COMPLETED")
    assert "DELIVERED" in exc.value.message


def test_missing_and_foreign_orders(orders, settled):
    with pytest.raises(NotFoundError):
        orders.get_order("ZZZ0000")
    with pytest.raises(NotFoundError):
        orders.update_status("ZZZ0000", "SHIPPED")
    with pytest.raises(ForbiddenError):
        orders.get_order(settled["order_id"], user_id=2)


def test_history_is_newest_first(orders, settled, fill_cart, gateway, settler):
    fill_cart(1, [(2, 1)])
    gateway.pay("ref-o2", 5000, PAYER)
    second, _ = settler.settle(1, "ref-o2")

    history = orders.order_history(1)

    assert [o["order_id"] for o in history] == [second["order_id"], settled["order_id"]]
    assert orders.order_history(2) == []
