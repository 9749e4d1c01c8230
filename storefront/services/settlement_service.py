# storefront/services/settlement_service.py
import enum
from typing import Any, Callable, Dict, List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.database import atomic
from storefront.data.models.order import OrderItemModel, OrderModel, SETTLED_STATUS
from storefront.domain.errors import EmptyCartError, PaymentGatewayError, PaymentVerificationError
from storefront.domain.identifiers import generate_order_id, to_major_units
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.payment_client import PaystackClient, VerifiedTransaction
from storefront.utils.settings import ORDER_ID_MAX_ATTEMPTS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class SettlementState(str, enum.Enum):
    UNVERIFIED = "UNVERIFIED"
    VERIFIED_PENDING_ORDER = "VERIFIED_PENDING_ORDER"
    SETTLED = "SETTLED"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"


class SettlementService:
    """
    Zamiana zweryfikowanej platnosci na zamowienie, dokladnie raz na referencje.

    Weryfikacja jest wolana przez klienta i moze przyjsc wiele razy
    (retry, podwojny callback, odswiezenie strony). Ostatecznym arbitrem jest
    unique na orders.transaction_id: przegrany insert czyta zwyciezce i go zwraca.

    1. weryfikacja w bramce
    2. replay - istniejace zamowienie dla referencji / order id
    3. koszyk (pusty -> ponowne sprawdzenie po transaction id)
    4. jedna transakcja: order + snapshot pozycji + czyszczenie koszyka
    5. powiadomienie po commit, bledy tylko logowane
    """

    def __init__(
        self,
        db: Session,
        gateway: PaystackClient,
        notifier: NotificationService,
        order_id_factory: Callable[[], str] = generate_order_id,
        max_order_id_attempts: int = ORDER_ID_MAX_ATTEMPTS,
    ):
        self.db = db
        self.gateway = gateway
        self.notifier = notifier
        self.order_id_factory = order_id_factory
        self.max_order_id_attempts = max(1, max_order_id_attempts)
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.users = UserRepo(db)
        self.orders = OrderService(db)

    def settle(
        self, user_id: int, reference: str, client_order_id: str | None = None
    ) -> Tuple[Dict[str, Any], bool]:
        """Returns the order and whether this call created it."""
        tx = self._verify(reference)

        existing = self.repo.find_existing(reference, client_order_id)
        if existing:
            logger.info(f"Settlement {reference}: replay, order {existing.order_id} already exists")
            return self.orders.present(existing), False

        cart = self.carts.get_cart_by_user(user_id)
        items = self.carts.get_cart_items(cart.id) if cart else []
        if not items:
            # a concurrent settlement may have just consumed the cart
            winner = self.repo.get_by_transaction_id(reference)
            if winner:
                logger.info(f"Settlement {reference}: cart already consumed by order {winner.order_id}")
                return self.orders.present(winner), False
            raise EmptyCartError("Cart not found" if cart is None else "Cart is empty")

        # snapshot before any rollback can expire the rows
        lines = [(i.id, i.product_id, i.quantity, i.amount) for i in items]
        order, created = self._create_order(user_id, reference, client_order_id, tx, lines)

        if created:
            logger.info(
                f"Settlement {reference}: {SettlementState.SETTLED.value}, order {order.order_id} "
                f"with {len(lines)} items"
            )
            self._notify(order)
        else:
            logger.info(f"Settlement {reference}: lost the race, returning order {order.order_id}")

        return self.orders.present(order), created

    def _verify(self, reference: str) -> VerifiedTransaction:
        logger.info(f"Settlement {reference}: {SettlementState.UNVERIFIED.value}")
        try:
            tx = self.gateway.verify(reference)
        except PaymentGatewayError as e:
            logger.warning(f"Settlement {reference}: {SettlementState.VERIFICATION_FAILED.value} ({e})")
            raise PaymentVerificationError(
                "Payment could not be verified, retry later",
                data={"reference": reference, "retryable": True},
            ) from e

        if not tx.successful:
            logger.warning(
                f"Settlement {reference}: {SettlementState.VERIFICATION_FAILED.value} (status {tx.status})"
            )
            raise PaymentVerificationError("Payment failed", data={"reference": reference, "retryable": False})

        if tx.reference != reference:
            logger.warning(f"Settlement {reference}: gateway answered for reference {tx.reference}")
            raise PaymentVerificationError(
                "Payment reference mismatch", data={"reference": reference, "retryable": False}
            )

        logger.info(f"Settlement {reference}: {SettlementState.VERIFIED_PENDING_ORDER.value}")
        return tx

    def _create_order(
        self,
        user_id: int,
        reference: str,
        client_order_id: str | None,
        tx: VerifiedTransaction,
        lines: List[Tuple[int, int, int, int]],
    ) -> Tuple[OrderModel, bool]:
        payer = self._payer(user_id, tx.metadata)
        amount = to_major_units(tx.amount)
        # client supplied ids are taken as-is, only generated ones are re-rolled
        attempts = 1 if client_order_id else self.max_order_id_attempts

        for attempt in range(1, attempts + 1):
            order_id = client_order_id or self.order_id_factory()
            try:
                with atomic(self.db):
                    order = self.repo.insert_order(
                        OrderModel(
                            order_id=order_id,
                            user_id=user_id,
                            amount=amount,
                            transaction_id=reference,
                            status=SETTLED_STATUS.value,
                            **payer,
                        )
                    )
                    self.repo.add_items(
                        OrderItemModel(
                            order_id=order.id,
                            product_id=product_id,
                            quantity=quantity,
                            amount=line_amount,
                            paid=True,
                        )
                        for _, product_id, quantity, line_amount in lines
                    )
                    self.carts.delete_cart_items(item_id for item_id, _, _, _ in lines)
                return order, True
            except IntegrityError:
                winner = self.repo.find_existing(reference, client_order_id)
                if winner:
                    return winner, False
                if client_order_id or attempt == attempts:
                    raise
                logger.warning(f"Settlement {reference}: order id {order_id} taken, re-rolling")

    def _payer(self, user_id: int, metadata: Any) -> Dict[str, Any]:
        # metadata was supplied by checkout and echoed back by the gateway, possibly as a string
        if not isinstance(metadata, dict):
            metadata = {}
        payer = {
            "first_name": metadata.get("first_name"),
            "last_name": metadata.get("last_name"),
            "email": metadata.get("email"),
            "address": metadata.get("address"),
            "phone": metadata.get("phone"),
        }
        if not (payer["first_name"] and payer["last_name"] and payer["email"]):
            user = self.users.get_user(user_id)
            if user:
                payer["first_name"] = payer["first_name"] or user.first_name
                payer["last_name"] = payer["last_name"] or user.last_name
                payer["email"] = payer["email"] or user.email
        return payer

    def _notify(self, order: OrderModel) -> None:
        try:
            self.notifier.send_payment_notification(order.email, order.order_id)
        except Exception as e:
            logger.warning(f"Notification for order {order.order_id} not sent: {e}")
