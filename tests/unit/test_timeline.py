"""Unit tests for the payment timeline"""

import pytest
from datetime import date
from tally_gateway.domain.exceptions import ValidationError
from tally_gateway.domain.models import TimelinePayment
from tally_gateway.domain.timeline import build_payment_timeline, payments_from_obligations


def test_build_payment_timeline_buckets_and_balance():
    """Payments are summed per day and the balance carries forward"""
    payments = [
        TimelinePayment(id="1", name="Netflix", amount=10, day=1),
        TimelinePayment(id="2", name="Water", amount=5, day=1, kind="bill"),
        TimelinePayment(id="3", name="Gym", amount=20, day=15),
    ]

    timeline = build_payment_timeline(payments)

    assert len(timeline.days) == 31
    first = timeline.days[0]
    assert (first.day, first.total, first.bill_total, first.subscription_total) == (1, 15, 5, 10)
    assert first.payment_count == 2
    assert first.running_balance == -15
    assert timeline.days[13].running_balance == -15  # Day 14: nothing new
    assert timeline.days[14].running_balance == -35
    assert timeline.days[30].running_balance == -35
    assert timeline.total == 35
    assert timeline.max_daily_total == 20


def test_build_payment_timeline_empty():
    timeline = build_payment_timeline([])
    assert timeline.total == 0
    assert timeline.max_daily_total == 1
    assert all(d.running_balance == 0 for d in timeline.days)


def test_timeline_payment_validation():
    with pytest.raises(ValidationError):
        TimelinePayment(id="1", name="x", amount=1, day=0)
    with pytest.raises(ValidationError):
        TimelinePayment(id="1", name="x", amount=1, day=32)
    with pytest.raises(ValidationError):
        TimelinePayment(id="1", name="x", amount=1, day=5, kind="invoice")
    with pytest.raises(ValidationError):
        TimelinePayment(id="1", name="x", amount=-1, day=5)


def test_payments_from_obligations(make_obligation):
    """Only billable obligations with a next payment date land on the timeline"""
    obligations = [
        make_obligation(id="a", amount=12, next_payment_date=date(2024, 4, 17), category="News"),
        make_obligation(id="b", next_payment_date=None),
        make_obligation(id="c", next_payment_date=date(2024, 4, 3), status="cancelled"),
    ]

    payments = payments_from_obligations(obligations)

    assert len(payments) == 1
    assert payments[0].id == "a"
    assert payments[0].day == 17
    assert payments[0].amount == 12
    assert payments[0].kind == "subscription"
    assert payments[0].category == "News"
