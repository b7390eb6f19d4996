"""
Tests for the ledger walk.

Covers:
- Opening entry and the running-total recurrence
- Inline injector splicing (including several shortfalls on one day)
- Shared capacity, latency and the injection ceiling
- Ordering and the ledger's DataFrame view
"""

from datetime import date, timedelta

import pytest

from core.schema import KIND_PRIORITY, LEDGER_COLUMNS
from data_prep.records import normalize_obligations
from engine.events import CashEvent, collect
from engine.ledger import OPENING_LABEL, build_ledger
from engine.offers import FundingOffer

JAN_1 = date(2026, 1, 1)
JAN_31 = date(2026, 1, 31)


def make_offer(name, priority, cap, *, latency_days=0, chunk=0.0):
    return FundingOffer(
        offer_id=name,
        name=name,
        priority=priority,
        latency_days=latency_days,
        available_on=JAN_1 + timedelta(days=latency_days),
        cap=cap,
        remaining=cap,
        chunk=chunk,
    )


def bill(day, amount, label="Bill", month=1):
    return CashEvent(date=date(2026, month, day), label=label, kind="bill", amount=-amount)


def income(day, amount, label="Income: Pay", month=1):
    return CashEvent(date=date(2026, month, day), label=label, kind="income", amount=amount)


def rows(ledger):
    return [(e.kind, e.amount, e.running_total) for e in ledger.events]


class TestScenario:

    def test_shortfall_without_offers(self):
        events = collect(
            normalize_obligations([{"ref": "Mortgage", "amount": 1200, "due_days": [15]}]),
            "bill", JAN_1, JAN_31,
        )
        ledger = build_ledger(1000, events, [], 100, window_start=JAN_1, window_end=JAN_31)

        assert rows(ledger) == [("opening", 0.0, 1000.0), ("bill", -1200.0, -200.0)]
        assert ledger.events[0].label == OPENING_LABEL
        assert ledger.events[0].date == JAN_1
        assert ledger.ending_balance == -200.0

    def test_injector_closes_shortfall(self):
        offer = make_offer("Savings", 1, 500.0)
        ledger = build_ledger(1000, [bill(15, 1200)], [offer], 100, window_start=JAN_1)

        assert rows(ledger) == [
            ("opening", 0.0, 1000.0),
            ("bill", -1200.0, -200.0),
            ("injector", 300.0, 100.0),
        ]
        assert ledger.injectors[0].date == date(2026, 1, 15)
        assert ledger.total_injected == 300.0
        assert ledger.window_end == date(2026, 1, 15)

    def test_at_buffer_is_not_a_shortfall(self):
        ledger = build_ledger(1000, [bill(15, 900)], [make_offer("Savings", 1, 500.0)], 100, window_start=JAN_1)
        assert ledger.injectors == []

    def test_cents_landing_on_buffer_is_not_a_shortfall(self):
        ledger = build_ledger(
            1000.30,
            [bill(5, 450.10), bill(6, 450.20)],
            [make_offer("Savings", 1, 500.0)],
            100,
            window_start=JAN_1,
        )
        assert ledger.injectors == []
        assert ledger.ending_balance == 100.0
        assert [e.running_total for e in ledger.events] == [1000.30, 550.20, 100.0]
        assert ledger.offers[0].remaining == 500.0

    def test_cents_shortfall_drawn_to_the_cent(self):
        ledger = build_ledger(
            1000.30, [bill(5, 900.41)], [make_offer("Savings", 1, 500.0)], 100, window_start=JAN_1
        )
        assert [e.amount for e in ledger.injectors] == [0.11]
        assert ledger.ending_balance == 100.0
        assert ledger.offers[0].remaining == 499.89

    def test_same_day_income_posts_first(self):
        ledger = build_ledger(
            1000,
            [bill(15, 1200), income(15, 500)],
            [make_offer("Savings", 1, 500.0)],
            100,
            window_start=JAN_1,
        )
        assert [e.kind for e in ledger.events] == ["opening", "income", "bill"]
        assert ledger.injectors == []


class TestSplicing:

    def test_injectors_affect_later_events(self):
        ledger = build_ledger(
            1000,
            [bill(15, 1200), bill(20, 50)],
            [make_offer("Savings", 1, 5000.0)],
            100,
            window_start=JAN_1,
        )
        assert rows(ledger)[2:] == [("injector", 300.0, 100.0), ("bill", -50.0, 50.0), ("injector", 50.0, 100.0)]

    def test_several_shortfalls_same_day(self):
        ledger = build_ledger(
            1000,
            [bill(15, 1200, "A"), bill(15, 500, "B")],
            [make_offer("Savings", 1, 5000.0)],
            100,
            window_start=JAN_1,
        )
        assert [e.kind for e in ledger.events] == ["opening", "bill", "bill", "injector", "injector"]
        assert ledger.total_injected == 800.0
        assert ledger.ending_balance == 100.0

    def test_capacity_shared_across_walk(self):
        offer = make_offer("Savings", 1, 500.0)
        ledger = build_ledger(1000, [bill(5, 1200), bill(20, 500)], [offer], 100, window_start=JAN_1)

        assert [e.amount for e in ledger.injectors] == [300.0, 200.0]
        assert ledger.ending_balance == -200.0
        assert ledger.offers[0].remaining == 0.0

    def test_latency_defers_help(self):
        offer = make_offer("Brokerage", 1, 1000.0, latency_days=10)
        ledger = build_ledger(1000, [bill(5, 1200), bill(15, 50)], [offer], 100, window_start=JAN_1)

        assert rows(ledger)[1] == ("bill", -1200.0, -200.0)
        assert [(e.date, e.amount) for e in ledger.injectors] == [(date(2026, 1, 15), 350.0)]

    def test_chunk_overshoot_kept(self):
        ledger = build_ledger(
            1000, [bill(15, 1150)], [make_offer("Brokerage", 1, 1000.0, chunk=100.0)], 100, window_start=JAN_1
        )
        assert ledger.injectors[0].amount == 300.0
        assert ledger.ending_balance == 150.0

    def test_zero_and_opening_events_dropped(self):
        stray = CashEvent(date=JAN_1, label="Old opening", kind="opening", amount=5.0)
        ledger = build_ledger(1000, [bill(3, 0), stray, bill(4, 10)], [], 0, window_start=JAN_1)
        assert rows(ledger) == [("opening", 0.0, 1000.0), ("bill", -10.0, 990.0)]

    def test_running_totals_from_input_are_ignored(self):
        event = bill(3, 10).with_running_total(12345.0)
        ledger = build_ledger(100, [event], [], 0, window_start=JAN_1)
        assert ledger.events[1].running_total == 90.0


class TestCeiling:

    def test_ceiling_stops_new_injectors(self):
        ledger = build_ledger(
            1000,
            [bill(5, 1200), bill(10, 500)],
            [make_offer("Savings", 1, 5000.0)],
            100,
            window_start=JAN_1,
            max_injections=1,
        )
        assert len(ledger.injectors) == 1
        assert ledger.injection_ceiling_hit
        assert ledger.ending_balance == -400.0

    def test_ceiling_hit_mid_allocation(self):
        ledger = build_ledger(
            1000,
            [bill(15, 1200)],
            [make_offer("Savings", 1, 50.0), make_offer("HELOC", 2, 1000.0)],
            100,
            window_start=JAN_1,
            max_injections=1,
        )
        assert [e.amount for e in ledger.injectors] == [50.0]
        assert ledger.injection_ceiling_hit

    def test_not_hit_when_need_met(self):
        ledger = build_ledger(
            1000, [bill(15, 1200)], [make_offer("Savings", 1, 500.0)], 100, window_start=JAN_1, max_injections=1
        )
        assert not ledger.injection_ceiling_hit

    def test_unfundable_run_is_bounded(self):
        events = [bill(d, 10, month=m) for m in (1, 2, 3) for d in range(1, 29)]
        ledger = build_ledger(0, events, [make_offer("Tiny", 1, 1e9)], 100, window_start=JAN_1, max_injections=5)
        assert len(ledger.injectors) <= 5


class TestProperties:

    @pytest.fixture
    def ledger(self):
        events = [
            income(14, 1026, "Income: SSI"),
            income(14, 1026, "Income: SSI", month=2),
            income(11, 1026, "Income: SSI", month=3),
            bill(1, 40, "Insurance"),
            bill(15, 1500, "Mortgage"),
            bill(15, 1500, "Mortgage", month=2),
            bill(15, 1500, "Mortgage", month=3),
            bill(17, 200, "Verizon"),
            bill(17, 200, "Verizon", month=2),
            bill(17, 200, "Verizon", month=3),
        ]
        offers = [
            make_offer("Savings", 1, 600.0, chunk=50.0),
            make_offer("Brokerage", 2, 1500.0, latency_days=40, chunk=100.0),
            make_offer("HELOC", 3, 2000.0),
        ]
        return build_ledger(500, events, offers, 100, window_start=JAN_1, window_end=date(2026, 3, 31))

    def test_running_total_recurrence(self, ledger):
        events = ledger.events
        assert events[0].running_total == ledger.opening_balance
        for prev, cur in zip(events, events[1:]):
            assert cur.running_total == pytest.approx(prev.running_total + cur.amount)

    def test_chronological_ordering(self, ledger):
        for prev, cur in zip(ledger.events, ledger.events[1:]):
            assert prev.date <= cur.date
            if prev.date == cur.date:
                assert KIND_PRIORITY[prev.kind] <= KIND_PRIORITY[cur.kind]

    def test_injector_eligibility(self, ledger):
        available = {o.offer_id: o.available_on for o in ledger.offers}
        assert ledger.injectors
        for e in ledger.injectors:
            assert e.date >= available[e.source]

    def test_capacity_conservation(self, ledger):
        for offer in ledger.offers:
            drawn = sum(e.amount for e in ledger.injectors if e.source == offer.offer_id)
            assert drawn <= offer.cap + 1e-9
            assert drawn == pytest.approx(offer.drawn)

    def test_idempotent(self):
        def build():
            offers = [make_offer("Savings", 1, 600.0, chunk=50.0), make_offer("HELOC", 2, 2000.0)]
            return build_ledger(500, [bill(15, 1500), bill(20, 700)], offers, 100, window_start=JAN_1)

        assert build().events == build().events


class TestDataFrame:

    def test_columns_and_dtypes(self):
        ledger = build_ledger(1000, [bill(15, 1200)], [make_offer("Savings", 1, 500.0)], 100, window_start=JAN_1)
        df = ledger.to_dataframe()
        assert list(df.columns) == list(LEDGER_COLUMNS)
        assert len(df) == len(ledger) == 3
        assert str(df["date"].dtype).startswith("datetime64")
        assert df["running_total"].tolist() == [1000.0, -200.0, 100.0]
