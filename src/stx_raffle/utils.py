"""Utility functions for the STX raffle client."""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

from .constants import MICRO_STX_PER_STX
from .exceptions import ValidationError


def stx_to_micro(amount: float | Decimal | int | str) -> int:
    """Convert a display STX amount to micro-STX, truncating toward zero."""
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError("Amount must be numeric", field="amount", value=amount)

    if not value.is_finite():
        raise ValidationError("Amount must be finite", field="amount", value=amount)

    if value < 0:
        raise ValidationError("Amount cannot be negative", field="amount", value=amount)

    micro = (value * MICRO_STX_PER_STX).to_integral_value(rounding=ROUND_DOWN)
    return int(micro)


def micro_to_stx(micro: int) -> Decimal:
    """Convert micro-STX to a Decimal STX amount."""
    return Decimal(micro) / Decimal(MICRO_STX_PER_STX)


def address_from_account(account: str | None) -> str | None:
    """Extract the address from a ``namespace:chainRef:address`` account id."""
    if not isinstance(account, str):
        return None

    parts = account.split(":")
    if len(parts) < 3 or not parts[2]:
        return None
    return parts[2]
