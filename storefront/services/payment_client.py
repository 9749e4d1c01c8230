# storefront/services/payment_client.py
from dataclasses import dataclass, field
from typing import Any, Dict

import requests
from requests import RequestException
from requests.utils import quote

from storefront.domain.errors import PaymentGatewayError
from storefront.utils.retry import http_retry
from storefront.utils.settings import PAYSTACK_BASE_URL, PAYSTACK_SECRET_KEY, PAYMENT_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class InitializedTransaction:
    reference: str
    authorization_url: str


@dataclass(frozen=True)
class VerifiedTransaction:
    reference: str
    status: str
    # minor currency unit
    amount: int
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def successful(self) -> bool:
        return self.status == "success"


class PaystackClient:
    """
    Klient bramki platnosci (Paystack-compatible REST API).
    - initialize: otwiera transakcje i zwraca adres przekierowania
    - verify: pobiera status transakcji po referencji
    Kazde wywolanie ma timeout, bledy transportu -> PaymentGatewayError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        secret_key: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout or PAYMENT_TIMEOUT_SECONDS
        self.http = session or requests.Session()
        self.http.headers.update(
            {
                "Authorization": f"Bearer {secret_key if secret_key is not None else PAYSTACK_SECRET_KEY}",
                "Content-Type": "application/json",
            }
        )

    def close(self) -> None:
        self.http.close()

    def initialize(
        self,
        email: str,
        amount: int,
        reference: str,
        callback_url: str,
        metadata: Dict[str, Any],
    ) -> InitializedTransaction:
        payload = {
            "email": email,
            "amount": amount,
            "reference": reference,
            "callback_url": callback_url,
            "metadata": metadata,
        }
        try:
            body = self._post_initialize(payload)
        except (RequestException, ValueError) as e:
            logger.error(f"Paystack initialize failed for {reference}: {e}")
            raise PaymentGatewayError(f"Payment gateway unavailable: {e}") from e

        if body.get("status") is not True:
            logger.warning(f"Paystack rejected initialize for {reference}: {body.get('message')}")
            raise PaymentGatewayError(body.get("message") or "Payment gateway rejected the transaction")

        data = body.get("data") or {}
        if not data.get("authorization_url"):
            raise PaymentGatewayError("Payment gateway returned no authorization url")

        return InitializedTransaction(
            reference=data.get("reference") or reference,
            authorization_url=data["authorization_url"],
        )

    def verify(self, reference: str) -> VerifiedTransaction:
        try:
            body = self._get_verify(reference)
        except (RequestException, ValueError) as e:
            logger.error(f"Paystack verify failed for {reference}: {e}")
            raise PaymentGatewayError(f"Payment gateway unavailable: {e}") from e

        data = body.get("data") or {}
        if body.get("status") is not True or not isinstance(data, dict):
            # unknown reference and similar are reported as a non-successful transaction
            return VerifiedTransaction(reference=reference, status="failed", amount=0)

        try:
            amount = int(data.get("amount") or 0)
        except (TypeError, ValueError) as e:
            raise PaymentGatewayError(f"Payment gateway returned a malformed amount: {data.get('amount')!r}") from e

        metadata = data.get("metadata")
        return VerifiedTransaction(
            reference=data.get("reference") or reference,
            status=str(data.get("status") or "failed"),
            amount=amount,
            metadata=metadata if isinstance(metadata, dict) else {},
        )

    # POST is only retried when the request never reached the gateway
    @http_retry(retry_on=requests.ConnectionError)
    def _post_initialize(self, payload: Dict[str, Any]) -> dict:
        url = f"{self.base_url}/transaction/initialize"
        logger.info(f"PaystackClient POST {url} reference={payload['reference']}")

        resp = self.http.post(url, json=payload, timeout=self.timeout)
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp.json()

    @http_retry()
    def _get_verify(self, reference: str) -> dict:
        # one path segment, never a path
        url = f"{self.base_url}/transaction/verify/{quote(reference, safe='')}"
        logger.info(f"PaystackClient GET {url}")

        resp = self.http.get(url, timeout=self.timeout)
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp.json()
