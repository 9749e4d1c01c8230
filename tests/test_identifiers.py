import re
from decimal import Decimal

from storefront.domain.identifiers import generate_order_id, new_payment_reference, to_major_units, to_minor_units


def test_order_id_format():
    for _ in range(200):
        assert re.fullmatch(r"[A-Z]{3}[1-9]\d{3}", generate_order_id())


def test_references_are_unique():
    assert len({new_payment_reference() for _ in range(100)}) == 100


def test_currency_conversion():
    assert to_minor_units(250) == 25000
    assert to_major_units(25000) == Decimal("250.00")
    assert to_major_units(12345) == Decimal("123.45")
