# techpedia/core/money.py
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_money(value: Decimal | int) -> Decimal:
    """
    Round an amount to 2 decimal places, halves away from zero
    (ROUND_HALF_UP): 10.005 -> 10.01, 10.004 -> 10.00.
    """
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(price: Decimal, quantity: int) -> Decimal:
    return price * quantity
