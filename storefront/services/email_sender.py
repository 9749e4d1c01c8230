# storefront/services/email_sender.py
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from storefront.utils import settings
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class EmailSender:
    """
    Simple SMTP sender.
    - port 465: implicit SSL
    - smtp_use_starttls=True (usually 587): STARTTLS upgrade
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        from_addr: Optional[str] = None,
        use_starttls: Optional[bool] = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user if user is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.from_addr = from_addr or settings.SMTP_FROM or self.user
        self.use_starttls = settings.SMTP_USE_STARTTLS if use_starttls is None else use_starttls

    def send(self, to: str, subject: str, body: str) -> None:
        if not (self.host and self.port and self.from_addr):
            raise RuntimeError("SMTP config incomplete: check host/port/from")

        msg = EmailMessage()
        msg["To"] = to
        msg["From"] = self.from_addr
        msg["Subject"] = subject
        msg.set_content(body)

        context = ssl.create_default_context()
        if self.use_starttls:
            with smtplib.SMTP(self.host, self.port) as server:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
                self._login(server)
                server.send_message(msg)
        else:
            with smtplib.SMTP_SSL(self.host, self.port, context=context) as server:
                self._login(server)
                server.send_message(msg)

        logger.info(f"Mail '{subject}' sent to {to}")

    def _login(self, server: smtplib.SMTP) -> None:
        if self.user and self.password:
            server.login(self.user, self.password)
