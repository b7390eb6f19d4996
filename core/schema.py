from __future__ import annotations

from typing import Dict, Tuple

EVENT_KINDS: Tuple[str, ...] = ("opening", "income", "bill", "debt", "injector")

# Same-day ordering: income posts before outflows, injectors answer last.
KIND_PRIORITY: Dict[str, int] = {
    "opening": 0,
    "income": 1,
    "bill": 2,
    "debt": 2,
    "injector": 3,
}

# +1 forces a value positive, -1 forces it negative.
KIND_SIGN: Dict[str, int] = {
    "income": 1,
    "injector": 1,
    "bill": -1,
    "debt": -1,
}

# Column order for Ledger.to_dataframe().
LEDGER_COLUMNS: Tuple[str, ...] = (
    "date",
    "label",
    "kind",
    "amount",
    "running_total",
    "account",
    "cycle",
    "source",
)
