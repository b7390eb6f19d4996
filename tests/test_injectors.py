"""
Tests for greedy injector allocation.
"""

from datetime import date, timedelta

from engine.injectors import allocate
from engine.offers import FundingOffer

RUN = date(2026, 1, 1)
ON = date(2026, 1, 15)


def make_offer(name, priority, cap, *, latency_days=0, chunk=0.0, cost=0.0):
    return FundingOffer(
        offer_id=name,
        name=name,
        priority=priority,
        latency_days=latency_days,
        available_on=RUN + timedelta(days=latency_days),
        cap=cap,
        remaining=cap,
        cost=cost,
        chunk=chunk,
    )


class TestAllocate:

    def test_priority_order_fills_from_first(self):
        small = make_offer("Savings", 1, 50.0)
        big = make_offer("HELOC", 2, 1000.0)
        got = allocate(300.0, ON, [big, small])

        assert [(e.account, e.amount) for e in got] == [("Savings", 50.0), ("HELOC", 250.0)]
        assert small.remaining == 0.0
        assert big.remaining == 750.0

    def test_injector_event_fields(self):
        got = allocate(100.0, ON, [make_offer("Savings", 1, 500.0)])
        event = got[0]
        assert event.date == ON
        assert event.kind == "injector"
        assert event.label == "Injector: Savings"
        assert event.cycle == "injector"
        assert event.source == "Savings"
        assert event.amount > 0

    def test_chunk_rounds_up(self):
        small = make_offer("Savings", 1, 50.0)
        big = make_offer("Brokerage", 2, 1000.0, chunk=100.0)
        got = allocate(300.0, ON, [small, big])
        assert [e.amount for e in got] == [50.0, 300.0]
        assert big.remaining == 700.0

    def test_chunk_never_exceeds_remaining(self):
        offer = make_offer("Brokerage", 1, 120.0, chunk=100.0)
        got = allocate(110.0, ON, [offer])
        assert [e.amount for e in got] == [120.0]
        assert offer.remaining == 0.0

    def test_latency_gates_eligibility(self):
        offer = make_offer("Brokerage", 1, 1000.0, latency_days=10)
        assert allocate(300.0, date(2026, 1, 5), [offer]) == []
        assert offer.remaining == 1000.0
        assert [e.amount for e in allocate(300.0, date(2026, 1, 11), [offer])] == [300.0]

    def test_exhausted_offers_skipped(self):
        empty = make_offer("Savings", 1, 100.0)
        empty.remaining = 0.0
        got = allocate(50.0, ON, [empty, make_offer("HELOC", 2, 100.0)])
        assert [e.account for e in got] == ["HELOC"]

    def test_cost_breaks_priority_ties(self):
        cheap = make_offer("B", 1, 100.0)
        pricey = make_offer("A", 1, 100.0, cost=5.0)
        got = allocate(150.0, ON, [pricey, cheap])
        assert [(e.account, e.amount) for e in got] == [("B", 100.0), ("A", 50.0)]

    def test_limit(self):
        offers = [make_offer("Savings", 1, 50.0), make_offer("HELOC", 2, 1000.0)]
        got = allocate(300.0, ON, offers, limit=1)
        assert len(got) == 1
        assert offers[1].remaining == 1000.0
        assert allocate(300.0, ON, offers, limit=0) == []

    def test_nothing_needed(self):
        offer = make_offer("Savings", 1, 50.0)
        assert allocate(0.0, ON, [offer]) == []
        assert allocate(-10.0, ON, [offer]) == []
        assert offer.remaining == 50.0

    def test_unmet_need_is_not_an_error(self):
        got = allocate(300.0, ON, [make_offer("Savings", 1, 100.0)])
        assert sum(e.amount for e in got) == 100.0
