import pytest
from sqlalchemy import func, select

from storefront.data.models import CartItemModel, OrderModel
from storefront.domain.errors import ClientError, EmptyCartError, NotFoundError, PaymentInitiationError
from storefront.domain.schemas import PayerIn
from storefront.services.checkout_service import CheckoutService

from tests.conftest import PAYER


@pytest.fixture
def checkout(db, gateway):
    return CheckoutService(db, gateway, callback_url="https://shop.test/thankyou")


def test_initiate_opens_a_gateway_transaction(checkout, fill_cart, gateway, db):
    fill_cart(1, [(1, 2), (2, 1)])

    result = checkout.initiate(1, PayerIn(**PAYER), 250)

    sent = gateway.initialized[0]
    assert result["reference"] == sent["reference"]
    assert result["redirect_url"] == f"https://checkout.test/{sent['reference']}"
    assert sent["amount"] == 25000
    assert sent["email"] == PAYER["email"]
    assert sent["callback_url"] == "https://shop.test/thankyou"
    assert sent["metadata"] == PAYER

    # nothing local changes until settlement
    assert db.execute(select(func.count()).select_from(OrderModel)).scalar_one() == 0
    assert db.execute(select(func.count()).select_from(CartItemModel)).scalar_one() == 2


def test_each_attempt_gets_a_fresh_reference(checkout, fill_cart):
    fill_cart(1, [(1, 1)])

    first = checkout.initiate(1, PayerIn(**PAYER), 100)
    second = checkout.initiate(1, PayerIn(**PAYER), 100)

    assert first["reference"] != second["reference"]


def test_empty_cart_is_rejected(checkout, gateway):
    with pytest.raises(EmptyCartError):
        checkout.initiate(1, PayerIn(**PAYER), 100)
    assert gateway.initialized == []


def test_unknown_user_is_rejected(checkout):
    with pytest.raises(NotFoundError):
        checkout.initiate(404, PayerIn(**PAYER), 100)


def test_gateway_failure_is_reported(checkout, fill_cart, gateway):
    fill_cart(1, [(1, 1)])
    gateway.fail_initialize = True

    with pytest.raises(PaymentInitiationError) as exc:
        checkout.initiate(1, PayerIn(**PAYER), 100)
    assert exc.value.status_code == 502


def test_amount_other_than_cart_total_is_rejected(checkout, fill_cart, gateway):
    fill_cart(1, [(1, 2), (2, 1)])

    with pytest.raises(ClientError) as exc:
        checkout.initiate(1, PayerIn(**PAYER), 200)

    assert exc.value.data == {"amount": 200, "cart_total": 250}
    assert gateway.initialized == []
