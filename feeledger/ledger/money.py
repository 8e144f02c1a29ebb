"""Currency helpers. All ledger amounts are Decimals held at two decimal places."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from feeledger.core.exceptions import ValidationError

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(val: Any) -> Decimal:
    if val is None:
        return ZERO
    dec = val if isinstance(val, Decimal) else Decimal(str(val))
    return dec.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(val: Any, field: str = "amount") -> Decimal:
    """Coerce user input to money, rejecting non-numeric, non-finite, negative and sub-cent values."""
    if val is None or isinstance(val, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(val, str):
        val = val.strip()
        if not val:
            raise ValidationError(f"{field} must be a number")
    try:
        dec = val if isinstance(val, Decimal) else Decimal(str(val))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number")
    if not dec.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if dec < 0:
        raise ValidationError(f"{field} cannot be negative")
    try:
        cents = dec.quantize(CENTS)
    except InvalidOperation:
        raise ValidationError(f"{field} is out of range")
    if dec != cents:
        raise ValidationError(f"{field} cannot have more than 2 decimal places")
    return to_money(dec)
