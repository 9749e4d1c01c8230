# storefront/domain/identifiers.py
import random
import string
import uuid
from decimal import Decimal

from storefront.utils.settings import CURRENCY_MINOR_FACTOR

_rng = random.SystemRandom()


def new_payment_reference() -> str:
    return str(uuid.uuid4())


def generate_order_id() -> str:
    """Three uppercase letters followed by four digits, e.g. ``ABC1234``."""
    letters = "".join(_rng.choice(string.ascii_uppercase) for _ in range(3))
    digits = _rng.randint(1000, 9999)
    return f"{letters}{digits}"


def to_minor_units(amount: int, factor: int = CURRENCY_MINOR_FACTOR) -> int:
    return int(amount) * factor


def to_major_units(minor_amount: int, factor: int = CURRENCY_MINOR_FACTOR) -> Decimal:
    return (Decimal(int(minor_amount)) / Decimal(factor)).quantize(Decimal("0.01"))
