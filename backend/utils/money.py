"""Fixed-point money helpers.

Amounts are held as integer paise everywhere below the wire schemas. Signed
balances use the Dr-positive convention: a debit balance is a positive number
of paise, a credit balance a negative one.
"""
from decimal import Decimal, InvalidOperation
from typing import Tuple, Union

from utils.exceptions import ValidationError

TWO_PLACES = Decimal("0.01")
PAISE_PER_RUPEE = 100
# Largest paise value a BigInteger column holds
MAX_PAISE = 2 ** 63 - 1

DR = "Dr"
CR = "Cr"


def to_paise(amount: Union[Decimal, int, str], field: str = "amount") -> int:
    """Convert a currency amount to integer paise.

    Rejects anything carrying more precision than the minor unit instead of
    rounding it away.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} is not a valid amount", details={"field": field, "value": str(amount)})
    if not value.is_finite():
        raise ValidationError(f"{field} is not a valid amount", details={"field": field, "value": str(amount)})
    try:
        quantized = value.quantize(TWO_PLACES)
    except InvalidOperation:
        raise ValidationError(f"{field} is too large", details={"field": field, "value": str(amount)})
    if quantized != value:
        raise ValidationError(
            f"{field} has more than two decimal places",
            details={"field": field, "value": str(amount)},
        )
    paise = int(quantized * PAISE_PER_RUPEE)
    if abs(paise) > MAX_PAISE:
        raise ValidationError(f"{field} is too large", details={"field": field, "value": str(amount)})
    return paise


def from_paise(paise: int) -> Decimal:
    return (Decimal(paise or 0) / PAISE_PER_RUPEE).quantize(TWO_PLACES)


def to_signed(magnitude: int, side: str) -> int:
    return magnitude if side == DR else -magnitude


def from_signed(signed: int, natural_side: str) -> Tuple[int, str]:
    """Split a signed balance into (magnitude, side). Zero keeps the natural side."""
    if signed > 0:
        return signed, DR
    if signed < 0:
        return -signed, CR
    return 0, natural_side
