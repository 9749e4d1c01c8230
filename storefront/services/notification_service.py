# storefront/services/notification_service.py
from smtplib import SMTPException

from storefront.celery_worker import celery_app
from storefront.services.email_sender import EmailSender
from storefront.utils.settings import STORE_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_SUBJECT = "Notification of Payment"


def payment_message(order_id: str) -> str:
    return f"Payment has been made successfully at {STORE_NAME}. Your order ID is {order_id}"


class NotificationService:
    """
    Serwis do wysylania powiadomien.
    Uzywa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_payment_notification(email: str, order_id: str) -> None:
        """
        Kolejkuje maila z potwierdzeniem platnosci.
        """
        send_payment_notification_task.delay(email, order_id)


@celery_app.task(name="storefront.services.notification_service.send_payment_notification_task")
def send_payment_notification_task(email: str, order_id: str):
    """
    Celery task - wysyla maila przez SMTP.
    Blad wysylki jest logowany, zamowienie jest juz zapisane.
    """
    try:
        EmailSender().send(email, PAYMENT_SUBJECT, payment_message(order_id))
    except (SMTPException, OSError, RuntimeError) as e:
        logger.warning(f"[NOTIFICATION] Mail not sent to {email} for order {order_id}: {e}")
        return {"email": email, "order_id": order_id, "status": "failed"}

    logger.info(f"[NOTIFICATION] Payment confirmation for order {order_id} sent to {email}")
    return {"email": email, "order_id": order_id, "status": "sent"}
