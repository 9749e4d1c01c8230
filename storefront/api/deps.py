# storefront/api/deps.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.services.cart_service import CartService
from storefront.services.checkout_service import CheckoutService
from storefront.services.deletion_guard import DeletionGuard
from storefront.services.order_service import OrderService
from storefront.services.settlement_service import SettlementService


def get_gateway(request: Request):
    return request.app.state.gateway


def get_notifier(request: Request):
    return request.app.state.notifier


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_checkout_service(db: Session = Depends(get_db), gateway=Depends(get_gateway)) -> CheckoutService:
    return CheckoutService(db, gateway)


def get_settlement_service(
    db: Session = Depends(get_db),
    gateway=Depends(get_gateway),
    notifier=Depends(get_notifier),
) -> SettlementService:
    return SettlementService(db, gateway, notifier)


def get_deletion_guard(db: Session = Depends(get_db)) -> DeletionGuard:
    return DeletionGuard(db)
