# storefront/services/checkout_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.domain.errors import ClientError, EmptyCartError, NotFoundError, PaymentGatewayError, PaymentInitiationError
from storefront.domain.identifiers import new_payment_reference, to_minor_units
from storefront.domain.schemas import PayerIn
from storefront.repos.cart_repo import CartRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.payment_client import PaystackClient
from storefront.utils.settings import PAYMENT_CALLBACK_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Otwiera transakcje w bramce dla niepustego koszyka.
    Nie tworzy zamowienia i nie rusza koszyka.
    """

    def __init__(self, db: Session, gateway: PaystackClient, callback_url: str | None = None):
        self.users = UserRepo(db)
        self.carts = CartRepo(db)
        self.gateway = gateway
        self.callback_url = callback_url or PAYMENT_CALLBACK_URL

    def initiate(self, user_id: int, payer: PayerIn, amount: int) -> Dict[str, Any]:
        if amount <= 0:
            raise ClientError("Amount must be greater than 0")

        if not self.users.get_user(user_id):
            raise NotFoundError("User not found")

        cart = self.carts.get_cart_by_user(user_id)
        items = self.carts.get_cart_items(cart.id) if cart else []
        if not items:
            raise EmptyCartError("Cart is empty")

        cart_total = sum(i.amount for i in items)
        if cart_total != amount:
            logger.warning(f"Checkout for user {user_id}: amount {amount} differs from cart total {cart_total}")
            raise ClientError("Amount does not match cart total", data={"amount": amount, "cart_total": cart_total})

        # correlates verification with this attempt, not an order id
        reference = new_payment_reference()
        metadata = {
            "first_name": payer.first_name,
            "last_name": payer.last_name,
            "email": payer.email,
            "address": payer.address,
            "phone": payer.phone,
        }

        try:
            tx = self.gateway.initialize(
                email=payer.email,
                amount=to_minor_units(amount),
                reference=reference,
                callback_url=self.callback_url,
                metadata=metadata,
            )
        except PaymentGatewayError as e:
            raise PaymentInitiationError("Payment initiation failed", data={"reason": str(e)}) from e

        logger.info(f"Checkout started for user {user_id}, reference {reference}")
        return {"redirect_url": tx.authorization_url, "reference": reference}
