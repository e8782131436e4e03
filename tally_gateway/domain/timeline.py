"""Payment timeline - distributes charges over the days of a month"""

from typing import Dict, Iterable, List

from tally_gateway.domain.models import (
    PaymentTimeline,
    RecurringObligation,
    TimelineDay,
    TimelinePayment,
)
from tally_gateway.domain.portfolio import is_billable

DAYS_IN_TIMELINE = 31


def payments_from_obligations(obligations: Iterable[RecurringObligation]) -> List[TimelinePayment]:
    """
    One subscription payment per billable obligation with a known next payment date.

    Stored obligations are all subscriptions, so these payments never carry
    kind="bill"; bill payments come only from callers that build
    TimelinePayment values themselves.
    """
    return [
        TimelinePayment(
            id=o.id,
            name=o.name,
            amount=o.amount,
            day=o.next_payment_date.day,
            kind="subscription",
            category=o.category,
        )
        for o in obligations
        if o.next_payment_date is not None and is_billable(o)
    ]


def build_payment_timeline(payments: Iterable[TimelinePayment]) -> PaymentTimeline:
    """
    Bucket payments by day of month and track a running balance.

    The balance starts at 0 on day 1 and each day's total is subtracted,
    so day N's balance is minus the cumulative spend through day N.
    max_daily_total is floored at 1 to keep chart scaling well-defined.
    """
    payments = list(payments)
    by_day: Dict[int, List[TimelinePayment]] = {}
    for payment in payments:
        by_day.setdefault(payment.day, []).append(payment)

    days: List[TimelineDay] = []
    balance = 0.0
    for day in range(1, DAYS_IN_TIMELINE + 1):
        day_payments = by_day.get(day, [])
        bill_total = sum(p.amount for p in day_payments if p.kind == "bill")
        subscription_total = sum(p.amount for p in day_payments if p.kind == "subscription")
        total = bill_total + subscription_total
        balance -= total
        days.append(
            TimelineDay(
                day=day,
                total=total,
                bill_total=bill_total,
                subscription_total=subscription_total,
                payment_count=len(day_payments),
                running_balance=balance,
            )
        )

    return PaymentTimeline(
        days=days,
        total=sum(d.total for d in days),
        max_daily_total=max([d.total for d in days] + [1.0]),
        payments=payments,
    )
