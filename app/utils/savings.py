# app/utils/savings.py
"""
Pure helpers for the savings ledger: amount normalisation, signed effects,
transaction descriptions and the goal completion rule. No I/O.
"""
from decimal import Decimal, InvalidOperation
from typing import Union

from app.core.errors import ValidationError
from app.models.savings_transaction import SavingsTransactionType

CENT = Decimal("0.01")
# Largest value a Numeric(12, 2) money column holds
MAX_BALANCE = Decimal("9999999999.99")


def normalize_amount(amount: Union[Decimal, int, float, str, None]) -> Decimal:
    """Coerce a caller-supplied amount into a positive Decimal with cent precision."""
    if amount is None or isinstance(amount, bool):
        raise ValidationError("Amount is required", field="amount")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount must be a number", field="amount")
    if not value.is_finite() or value <= 0:
        raise ValidationError("Amount must be greater than zero", field="amount")
    if value != value.quantize(CENT):
        raise ValidationError("Amount cannot have more than two decimal places", field="amount")
    return value.quantize(CENT)


def normalize_type(tx_type: Union[SavingsTransactionType, str, None]) -> SavingsTransactionType:
    if tx_type is None:
        raise ValidationError("Transaction type is required", field="type")
    try:
        return SavingsTransactionType(tx_type)
    except ValueError:
        raise ValidationError("Transaction type must be DEPOSIT or WITHDRAWAL", field="type")


def signed_amount(tx_type: SavingsTransactionType, amount: Decimal) -> Decimal:
    return amount if tx_type == SavingsTransactionType.DEPOSIT else -amount


def describe_transaction(tx_type: SavingsTransactionType, amount: Decimal) -> str:
    """E.g. "Deposit of $30.00" or "Withdrawal of $50.00"."""
    label = "Deposit" if tx_type == SavingsTransactionType.DEPOSIT else "Withdrawal"
    return f"{label} of ${amount:.2f}"


def evaluate_completion(
    previous_amount: Decimal,
    delta: Decimal,
    target_amount: Decimal,
    tx_type: SavingsTransactionType,
    was_completed: bool,
) -> bool:
    """
    Completion flag after applying `delta` (a positive magnitude).

    Deposits recompute the flag from the new total. Withdrawals never clear a
    flag that is already set, and never set one.
    """
    if tx_type == SavingsTransactionType.DEPOSIT:
        return previous_amount + delta >= target_amount
    return bool(was_completed)


def ensure_within_limit(total: Decimal, field: str = "amount") -> Decimal:
    """Reject a resulting balance the money columns cannot store."""
    if total > MAX_BALANCE:
        raise ValidationError(
            f"Resulting balance would exceed the maximum of {MAX_BALANCE:,.2f}", field=field
        )
    return total
