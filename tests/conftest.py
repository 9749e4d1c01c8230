import threading

import pytest
from fastapi.testclient import TestClient

from storefront.api import create_app
from storefront.data.database import Base, create_db_engine, make_session_factory
from storefront.data.models import (
    CategoryModel,
    ProductFeatureModel,
    ProductImageModel,
    ProductModel,
    UserModel,
)
from storefront.domain.errors import PaymentGatewayError
from storefront.services.cart_service import CartService
from storefront.services.payment_client import InitializedTransaction, VerifiedTransaction
from storefront.services.settlement_service import SettlementService


PAYER = {
    "first_name": "Ada",
    "last_name": "Obi",
    "email": "ada@example.com",
    "address": "12 Marina Road, Lagos",
    "phone": "+2348000000000",
}


class FakeGateway:
    """In-process stand-in for the payment provider."""

    def __init__(self):
        self.transactions = {}
        self.initialized = []
        self.verify_calls = 0
        self.fail_initialize = False
        self.unreachable = False
        self.barrier = None
        self._lock = threading.Lock()

    def initialize(self, email, amount, reference, callback_url, metadata):
        if self.fail_initialize:
            raise PaymentGatewayError("gateway down")
        self.initialized.append(
            {"email": email, "amount": amount, "reference": reference, "callback_url": callback_url, "metadata": metadata}
        )
        self.pay(reference, amount, metadata)
        return InitializedTransaction(reference=reference, authorization_url=f"https://checkout.test/{reference}")

    def pay(self, reference, amount, metadata=None, status="success"):
        self.transactions[reference] = {"amount": amount, "metadata": dict(metadata or PAYER), "status": status}

    def verify(self, reference):
        with self._lock:
            self.verify_calls += 1
        if self.barrier is not None:
            self.barrier.wait()
        if self.unreachable:
            raise PaymentGatewayError("read timeout")
        tx = self.transactions.get(reference)
        if tx is None:
            return VerifiedTransaction(reference=reference, status="failed", amount=0)
        return VerifiedTransaction(
            reference=reference, status=tx["status"], amount=tx["amount"], metadata=dict(tx["metadata"])
        )

    def close(self):
        pass


class RecordingNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []
        self._lock = threading.Lock()

    def send_payment_notification(self, email, order_id):
        if self.fail:
            raise ConnectionError("broker unreachable")
        with self._lock:
            self.sent.append((email, order_id))


def seed_catalog(session_factory):
    db = session_factory()
    try:
        db.add_all(
            [
                UserModel(id=1, first_name="Ada", last_name="Obi", email="ada@example.com"),
                UserModel(id=2, first_name="Tunde", last_name="Bello", email="tunde@example.com"),
                UserModel(id=3, first_name="No", last_name="Orders", email="noorders@example.com"),
                CategoryModel(id=1, name="Trucks"),
                CategoryModel(id=2, name="Empty"),
            ]
        )
        db.flush()
        db.add_all(
            [
                ProductModel(id=1, name="Tipper", price=100, category_id=1),
                ProductModel(id=2, name="Trailer", price=50, category_id=1),
                ProductModel(id=3, name="Van", price=30, category_id=1),
            ]
        )
        db.flush()
        db.add_all(
            [
                ProductFeatureModel(product_id=1, feature="Diesel"),
                ProductFeatureModel(product_id=1, feature="Manual"),
                ProductImageModel(product_id=1, image_url="https://img.test/1.jpg"),
                ProductImageModel(product_id=2, image_url="https://img.test/2.jpg"),
            ]
        )
        db.commit()
    finally:
        db.close()


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = make_session_factory(engine)
    seed_catalog(factory)
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fill_cart(db):
    def _fill(user_id, lines):
        svc = CartService(db)
        for product_id, quantity in lines:
            svc.add_item(user_id, product_id, quantity)
        return svc.get_cart(user_id)

    return _fill


@pytest.fixture
def settler(db, gateway, notifier):
    return SettlementService(db, gateway, notifier)


@pytest.fixture
def client(engine, session_factory, gateway, notifier):
    app = create_app(engine=engine, gateway=gateway, notifier=notifier)
    return TestClient(app)
