from __future__ import annotations

import datetime as dt
from decimal import Decimal
import math
from typing import Any

import numpy as np

from luvatrix_heatmap.errors import HeatmapDataError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if pd is not None and value is pd.NaT:
        return True
    if isinstance(value, (float, np.floating)):
        return bool(np.isnan(value))
    if isinstance(value, np.datetime64):
        return bool(np.isnat(value))
    return False


def is_temporal(value: Any) -> bool:
    return isinstance(value, (dt.date, np.datetime64))


def to_number(value: Any, *, label: str = "value") -> float:
    """Map a numeric or temporal value onto a float; temporal values become UTC epoch milliseconds."""
    if isinstance(value, dt.datetime):
        if value.tzinfo is None:
            # Naive timestamps are read as UTC so results never depend on the host zone.
            value = value.replace(tzinfo=dt.timezone.utc)
        delta = value - EPOCH
        return float(delta.days * 86_400_000 + delta.seconds * 1000) + delta.microseconds / 1000.0
    if isinstance(value, dt.date):
        return to_number(dt.datetime(value.year, value.month, value.day), label=label)
    if isinstance(value, np.datetime64):
        return float(value.astype("datetime64[us]").astype(np.int64)) / 1000.0
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool):
        return float(value)
    raise HeatmapDataError(f"{label} {value!r} is neither numeric nor temporal")


def from_millis(ms: float) -> dt.datetime:
    if not math.isfinite(ms):
        raise HeatmapDataError(f"cannot convert {ms!r} to a timestamp")
    return EPOCH + dt.timedelta(milliseconds=ms)
