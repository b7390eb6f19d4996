from __future__ import annotations

import math
from datetime import date, datetime
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta


def excel_round(x, decimals: int = 2):
    """Excel ROUND: half away from zero (vectorized)."""
    m = 10 ** decimals
    x = np.asarray(x, dtype=float)
    return np.sign(x) * (np.floor(np.abs(x) * m + 0.5) / m)


def round_money(amount) -> float:
    """Scalar ``excel_round`` to cents; -0.0 comes back as 0.0."""
    return float(excel_round(amount, 2)) + 0.0


def parse_date(value) -> Optional[date]:
    """
    Coerce a date-like value to ``datetime.date``.

    Accepts date/datetime/Timestamp objects and strings in ISO (YYYY-MM-DD)
    or US (MM/DD/YYYY) form. Returns None for anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    ts = pd.to_datetime(value.strip(), errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def months_between(start: date, end: date) -> List[Tuple[int, int]]:
    """Every (year, month) touched by [start, end], inclusive."""
    out = []
    cursor = date(start.year, start.month, 1)
    last = date(end.year, end.month, 1)
    while cursor <= last:
        out.append((cursor.year, cursor.month))
        cursor += relativedelta(months=1)
    return out


def round_up_to_chunk(amount: float, chunk: float) -> float:
    """Round ``amount`` up to the next multiple of ``chunk`` (no-op when chunk <= 0)."""
    if chunk is None or chunk <= 0:
        return amount
    # round() guards against 2.0000000001 style float noise
    return math.ceil(round(amount / chunk, 9)) * chunk
