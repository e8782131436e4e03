"""Row adapter - the one place storage shapes are turned into domain obligations"""

from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from tally_gateway.config import settings
from tally_gateway.domain.exceptions import ValidationError
from tally_gateway.domain.models import RecurringObligation
from tally_gateway.utils.date_utils import parse_date

# Canonical field -> columns seen across the subscriptions and user_bills tables
FIELD_ALIASES = {
    "amount": ("amount", "amount_due", "cost"),
    "recurrence": ("recurrence", "billing_cycle", "billing_frequency", "frequency"),
    "next_payment_date": ("next_payment_date", "next_due_date", "next_billing_date", "next_renewal_date"),
    "service_provider": ("service_provider", "vendor", "provider"),
}

# Legacy billing_frequency spellings
CADENCE_SPELLINGS = {
    "bi-weekly": "bi_weekly",
    "semiannually": "semi_annual",
    "semi-annually": "semi_annual",
    "semi_annually": "semi_annual",
    "semi-annual": "semi_annual",
    "annually": "annual",
}


def _first(row: Mapping[str, Any], names: Tuple[str, ...]) -> Any:
    for name in names:
        value = row.get(name)
        if value is not None:
            return value
    return None


def _number(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as e:
            raise ValidationError(f"Not a number: {value!r}") from e
    return value


def _date(row: Mapping[str, Any], field: str, names: Tuple[str, ...] = ()):
    raw = _first(row, names or (field,))
    try:
        return parse_date(raw)
    except ValueError as e:
        raise ValidationError(f"Unparseable {field}: {raw!r}") from e


def normalize_recurrence(value: Any) -> Optional[str]:
    """
    Map legacy cadence spellings onto the canonical names; others pass through.

    Non-string values (e.g. an integer in a legacy frequency column) are
    stringified, so they reach the cadence parser as unknown values and fall
    back to monthly.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    key = value.strip().lower()
    return CADENCE_SPELLINGS.get(key, value)


def obligation_from_row(row: Mapping[str, Any]) -> RecurringObligation:
    """
    Build a RecurringObligation from a stored row.

    Resolves column aliases and legacy cadence spellings, converts Decimal
    and string numbers, and parses ISO date strings.

    Raises:
        ValidationError: Missing id/amount/start_date, or values that fail
            RecurringObligation's invariants
    """
    if row.get("id") is None:
        raise ValidationError("Row has no id")

    amount = _number(_first(row, FIELD_ALIASES["amount"]))
    if amount is None:
        raise ValidationError(f"Subscription {row['id']} has no amount")

    start_date = _date(row, "start_date")
    if start_date is None:
        raise ValidationError(f"Subscription {row['id']} has no start_date")

    provider = _first(row, FIELD_ALIASES["service_provider"])

    return RecurringObligation(
        id=str(row["id"]),
        amount=amount,
        start_date=start_date,
        recurrence=normalize_recurrence(_first(row, FIELD_ALIASES["recurrence"])),
        end_date=_date(row, "end_date"),
        roi_expected=_number(row.get("roi_expected")),
        roi_actual=_number(row.get("roi_actual")),
        is_active=row.get("is_active"),
        status=row.get("status"),
        name=row.get("name") or "",
        service_provider=provider,
        category=row.get("category"),
        currency=row.get("currency") or settings.default_currency,
        next_payment_date=_date(row, "next_payment_date", FIELD_ALIASES["next_payment_date"]),
    )
