"""Billing cadence normalization to a common monthly basis"""

import warnings
from enum import Enum
from typing import Dict, Optional

from tally_gateway.domain.exceptions import UnknownCadenceWarning


class Cadence(str, Enum):
    """Billing interval of a recurring obligation"""

    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi_weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi_annual"
    ANNUAL = "annual"


# Charges per calendar month for one charge per cadence interval
MONTHLY_MULTIPLIERS: Dict[Cadence, float] = {
    Cadence.DAILY: 30,
    Cadence.WEEKLY: 4.33,  # Average weeks in a month
    Cadence.BI_WEEKLY: 2.17,  # Average bi-weeks in a month
    Cadence.MONTHLY: 1,
    Cadence.QUARTERLY: 1 / 3,
    Cadence.SEMI_ANNUAL: 1 / 6,
    Cadence.ANNUAL: 1 / 12,
}

_ALIASES: Dict[str, Cadence] = {
    "biweekly": Cadence.BI_WEEKLY,
    "yearly": Cadence.ANNUAL,
}


def parse_cadence(value: Optional[str]) -> Optional[Cadence]:
    """Match a recurrence string (case-insensitive), or None if unrecognised"""
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return Cadence(key)
    except ValueError:
        return None


def is_known_cadence(value: Optional[str]) -> bool:
    return parse_cadence(value) is not None


def is_unknown_cadence(value: Optional[str]) -> bool:
    """True for a non-empty recurrence that matches no cadence; absent values are not unknown"""
    return value is not None and bool(str(value).strip()) and parse_cadence(value) is None


def resolve_cadence(value: Optional[str]) -> Cadence:
    """
    Like parse_cadence, but falls back to monthly.

    An unrecognised non-empty value emits UnknownCadenceWarning; absent
    values fall back silently since monthly is the documented default.
    """
    cadence = parse_cadence(value)
    if cadence is not None:
        return cadence
    if is_unknown_cadence(value):
        warnings.warn(
            f"Unknown recurrence {value!r}, treating as monthly",
            UnknownCadenceWarning,
            stacklevel=2,
        )
    return Cadence.MONTHLY


def monthly_multiplier(value: Optional[str]) -> float:
    """Multiplier turning a per-cycle amount into a per-month amount (1 if unknown)"""
    cadence = parse_cadence(value)
    return MONTHLY_MULTIPLIERS[cadence] if cadence is not None else 1


def normalize_to_monthly(amount: float, cadence: Optional[str]) -> float:
    """
    Convert an amount charged once per ``cadence`` into its monthly equivalent.

    No rounding is applied; callers round display values. Unknown or absent
    cadences use the monthly multiplier (1) rather than raising.

    Example:
        normalize_to_monthly(100, "quarterly") -> 33.333...
        normalize_to_monthly(100, "bogus")     -> 100
    """
    return amount * monthly_multiplier(cadence)
