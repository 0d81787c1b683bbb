from __future__ import annotations

import bisect
from collections.abc import Callable, Sequence
import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
import math
from typing import Any, Protocol

import numpy as np

from luvatrix_heatmap.palettes import Color, Palette
from luvatrix_heatmap.values import EPOCH, from_millis, is_missing, to_number


SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS
MONTH_MS = 30 * DAY_MS
YEAR_MS = 365 * DAY_MS


class Scale(Protocol):
    domain: tuple[Any, ...]
    range: tuple[Any, ...]

    def __call__(self, value: Any) -> Any: ...

    def invert(self, value: Any) -> Any: ...


ScaleFactory = Callable[[Sequence[Any], Sequence[Any]], Scale]


@dataclass(frozen=True)
class LinearScale:
    """Continuous mapping of a two-value numeric domain onto a pixel range.

    Temporal domain values are read as UTC epoch milliseconds, so datetimes and
    plain numbers go through the same interface. Values outside the domain
    extrapolate linearly.
    """

    domain: tuple[Any, Any]
    range: tuple[float, float]
    _d0: float = field(init=False, repr=False)
    _d1: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.domain) != 2 or len(self.range) != 2:
            raise ValueError("continuous scales need a 2-value domain and a 2-value range")
        object.__setattr__(self, "domain", tuple(self.domain))
        object.__setattr__(self, "range", (float(self.range[0]), float(self.range[1])))
        object.__setattr__(self, "_d0", to_number(self.domain[0], label="x domain value"))
        object.__setattr__(self, "_d1", to_number(self.domain[1], label="x domain value"))

    @property
    def numeric_domain(self) -> tuple[float, float]:
        return (self._d0, self._d1)

    def _normalize(self, number: float) -> float:
        span = self._d1 - self._d0
        if span == 0:
            return 0.5
        return (number - self._d0) / span

    def __call__(self, value: Any) -> float:
        if is_missing(value):
            return math.nan
        r0, r1 = self.range
        return r0 + self._normalize(to_number(value, label="x value")) * (r1 - r0)

    def map_array(self, values: Sequence[Any]) -> np.ndarray:
        return np.asarray([self(v) for v in values], dtype=np.float64)

    def invert(self, pixel: float) -> Any:
        r0, r1 = self.range
        t = 0.5 if r1 == r0 else (float(pixel) - r0) / (r1 - r0)
        return self._d0 + t * (self._d1 - self._d0)

    def ticks(self, count: int) -> np.ndarray:
        lo, hi = sorted(self.numeric_domain)
        ticks = generate_nice_ticks(lo, hi, max(1, int(count)))
        eps = max(1e-12, (hi - lo) * 1e-9)
        return ticks[(ticks >= lo - eps) & (ticks <= hi + eps)]

    def tick_labels(self, ticks: np.ndarray, fmt: str | None = None) -> list[str]:
        if fmt is None:
            return format_ticks_for_axis(ticks)
        return [_apply_number_format(float(v), fmt) for v in ticks]


@dataclass(frozen=True)
class TimeScale(LinearScale):
    """Linear scale over UTC timestamps with calendar-aware ticks."""

    def invert(self, pixel: float) -> dt.datetime:
        return from_millis(super().invert(pixel))

    def ticks(self, count: int) -> np.ndarray:
        lo, hi = sorted(self.numeric_domain)
        return generate_time_ticks(lo, hi, max(1, int(count)))

    def tick_labels(self, ticks: np.ndarray, fmt: str | None = None) -> list[str]:
        if fmt is None:
            fmt = _auto_time_format(ticks)
        elif "%" not in fmt:
            return [_apply_number_format(float(v), fmt) for v in ticks]
        return [from_millis(float(v)).strftime(fmt) for v in ticks]


@dataclass(frozen=True)
class BandScale:
    """Ordered categories onto equal-width adjacent bands of a pixel range.

    With an inverted range (``range[0] > range[1]``) the first category sits
    at the ``range[0]`` end. Unknown values map to ``None``.
    """

    domain: tuple[Any, ...]
    range: tuple[float, float]
    padding_inner: float = 0.0
    padding_outer: float = 0.0
    align: float = 0.5
    step: float = field(init=False)
    bandwidth: float = field(init=False)
    _positions: dict[Any, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.range) != 2:
            raise ValueError("band scales need a 2-value range")
        if not 0 <= self.padding_inner <= 1 or self.padding_outer < 0 or not 0 <= self.align <= 1:
            raise ValueError("band padding_inner/align must be in [0, 1] and padding_outer >= 0")
        domain = tuple(dict.fromkeys(self.domain))
        r0, r1 = float(self.range[0]), float(self.range[1])
        n = len(domain)
        reverse = r1 < r0
        start, stop = (r1, r0) if reverse else (r0, r1)
        step = (stop - start) / max(1.0, n - self.padding_inner + self.padding_outer * 2)
        start += (stop - start - step * (n - self.padding_inner)) * self.align
        positions = [start + step * i for i in range(n)]
        if reverse:
            positions.reverse()
        object.__setattr__(self, "domain", domain)
        object.__setattr__(self, "range", (r0, r1))
        object.__setattr__(self, "step", step)
        object.__setattr__(self, "bandwidth", step * (1.0 - self.padding_inner))
        object.__setattr__(self, "_positions", dict(zip(domain, positions)))

    def __call__(self, value: Any) -> float | None:
        return self._positions.get(value)

    def __contains__(self, value: Any) -> bool:
        return value in self._positions

    def bands(self) -> list[tuple[Any, float, float]]:
        return [(value, pos, pos + self.bandwidth) for value, pos in self._positions.items()]

    def invert(self, pixel: float) -> Any:
        px = float(pixel)
        for value, lo, hi in self.bands():
            if lo <= px < hi:
                return value
        return None


@dataclass(frozen=True)
class PiecewiseScale:
    """Clamped piecewise-linear mapping from a multi-stop domain to unit stops.

    A value equal to several coinciding stops maps halfway between the
    first and last of their range stops.
    """

    domain: tuple[float, ...]
    range: tuple[float, ...]

    def __post_init__(self) -> None:
        domain = tuple(float(v) for v in self.domain)
        rng = tuple(float(v) for v in self.range)
        if len(domain) < 2 or len(domain) != len(rng):
            raise ValueError("piecewise scales need matching domain/range stops (at least two)")
        if any(math.isnan(v) for v in domain):
            raise ValueError(f"fill domain contains NaN: {domain!r}")
        if domain[0] > domain[-1]:
            domain = domain[::-1]
            rng = rng[::-1]
        if any(b < a for a, b in zip(domain, domain[1:])):
            raise ValueError(f"fill domain must be monotonic: {self.domain!r}")
        object.__setattr__(self, "domain", domain)
        object.__setattr__(self, "range", rng)

    def __call__(self, value: Any) -> float:
        v = to_number(value, label="fill value")
        lo, hi = self.domain[0], self.domain[-1]
        v = min(max(v, lo), hi)
        first = bisect.bisect_left(self.domain, v)
        last = bisect.bisect_right(self.domain, v) - 1
        if last > first:
            # Repeated stops: a constant domain lands on the middle range stop.
            return (self.range[first] + self.range[last]) / 2.0
        i = max(0, min(len(self.domain) - 2, last))
        d0, d1 = self.domain[i], self.domain[i + 1]
        r0, r1 = self.range[i], self.range[i + 1]
        return r0 + (v - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, unit: float) -> float:
        u = float(unit)
        rng = self.range
        dom = self.domain
        if rng[0] > rng[-1]:
            rng = rng[::-1]
            dom = dom[::-1]
        u = min(max(u, rng[0]), rng[-1])
        i = max(0, min(len(rng) - 2, bisect.bisect_right(rng, u) - 1))
        r0, r1 = rng[i], rng[i + 1]
        t = 0.5 if r1 == r0 else (u - r0) / (r1 - r0)
        return dom[i] + t * (dom[i + 1] - dom[i])


@dataclass(frozen=True)
class ColorScale:
    """Composition of a domain-to-unit scale and a unit-to-colour palette."""

    unit: Scale
    palette: Palette
    unknown: Any = None

    @property
    def domain(self) -> tuple[Any, ...]:
        return self.unit.domain

    @property
    def range(self) -> tuple[Any, ...]:
        return self.unit.range

    def __call__(self, value: Any) -> Color | Any:
        if is_missing(value):
            return self.unknown
        return self.palette(self.unit(value))

    def invert(self, unit: float) -> Any:
        return self.unit.invert(unit)


X_SCALE_TYPES: dict[str, ScaleFactory] = {"linear": LinearScale, "time": TimeScale, "utc": TimeScale}
Y_SCALE_TYPES: dict[str, ScaleFactory] = {"band": BandScale}
FILL_SCALE_TYPES: dict[str, ScaleFactory] = {"linear": PiecewiseScale}


def resolve_scale_factory(selector: str | ScaleFactory, registry: dict[str, ScaleFactory], *, kind: str) -> ScaleFactory:
    if isinstance(selector, str):
        try:
            return registry[selector.lower()]
        except KeyError:
            raise ValueError(f"unknown {kind} scale type: {selector}") from None
    if not callable(selector):
        raise ValueError(f"{kind} scale type must be a name or a factory; got {type(selector)!r}")
    return selector


def generate_time_ticks(lo_ms: float, hi_ms: float, target: int) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if lo_ms == hi_ms:
        return np.asarray([lo_ms], dtype=np.float64)
    wanted = (hi_ms - lo_ms) / target
    if wanted < SECOND_MS:
        ticks = generate_nice_ticks(lo_ms, hi_ms, target)
        return ticks[(ticks >= lo_ms) & (ticks <= hi_ms)]

    durations = [d for d, _ in _TIME_INTERVALS]
    i = bisect.bisect_right(durations, wanted)
    if i == len(_TIME_INTERVALS):
        years = _nice_number(wanted / YEAR_MS, round_result=True)
        return _calendar_ticks(lo_ms, hi_ms, months=max(1, int(round(years))) * 12)
    if i > 0 and wanted / durations[i - 1] < durations[i] / wanted:
        i -= 1
    duration, offset = _TIME_INTERVALS[i]
    if duration >= MONTH_MS:
        return _calendar_ticks(lo_ms, hi_ms, months=int(round(duration / MONTH_MS)) if duration < YEAR_MS else 12)
    first = math.ceil((lo_ms - offset) / duration) * duration + offset
    return np.arange(first, hi_ms + 0.5, duration, dtype=np.float64)


# (duration, alignment offset from the epoch); weeks start on Sunday 1970-01-04.
_TIME_INTERVALS: list[tuple[float, float]] = [
    (SECOND_MS, 0),
    (5 * SECOND_MS, 0),
    (15 * SECOND_MS, 0),
    (30 * SECOND_MS, 0),
    (MINUTE_MS, 0),
    (5 * MINUTE_MS, 0),
    (15 * MINUTE_MS, 0),
    (30 * MINUTE_MS, 0),
    (HOUR_MS, 0),
    (3 * HOUR_MS, 0),
    (6 * HOUR_MS, 0),
    (12 * HOUR_MS, 0),
    (DAY_MS, 0),
    (2 * DAY_MS, 0),
    (WEEK_MS, 3 * DAY_MS),
    (MONTH_MS, 0),
    (3 * MONTH_MS, 0),
    (YEAR_MS, 0),
]


def _calendar_ticks(lo_ms: float, hi_ms: float, *, months: int) -> np.ndarray:
    start = from_millis(lo_ms)
    month_index = start.year * 12 + (start.month - 1)
    month_index = -(-month_index // months) * months
    if _month_start_ms(month_index) < lo_ms:
        month_index += months
    out: list[float] = []
    while True:
        ms = _month_start_ms(month_index)
        if ms > hi_ms:
            break
        out.append(ms)
        month_index += months
    return np.asarray(out, dtype=np.float64)


def _month_start_ms(month_index: int) -> float:
    year, month = divmod(month_index, 12)
    return to_number(dt.datetime(year, month + 1, 1, tzinfo=EPOCH.tzinfo))


def _auto_time_format(ticks: np.ndarray) -> str:
    if ticks.size < 2:
        return "%Y-%m-%d"
    step = float(np.min(np.diff(ticks)))
    if step < MINUTE_MS:
        return "%H:%M:%S"
    if step < DAY_MS:
        return "%H:%M"
    if step < 28 * DAY_MS:
        return "%b %d"
    if step < 365 * DAY_MS:
        return "%B"
    return "%Y"


def _apply_number_format(value: float, fmt: str) -> str:
    if fmt.endswith(("d", "n")) and "." not in fmt:
        return format(int(round(value)), fmt)
    return format(value, fmt)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    """Round-number ticks covering ``[vmin, vmax]``, about ``target`` of them."""
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)
    step = _nice_number(_nice_number(vmax - vmin, round_result=False) / max(target - 1, 1), round_result=True)
    # Integer multiples of the step keep tick values free of accumulated drift.
    multiples = np.arange(math.floor(vmin / step), math.ceil(vmax / step) + 1, dtype=np.float64)
    ticks = multiples * step
    ticks[np.abs(ticks) <= step * 1e-9] = 0.0
    return ticks


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    step = float(abs(ticks[1] - ticks[0])) if ticks.size > 1 else None
    decimals = _decimals_for_step(step)
    return [_format_tick(float(v), decimals=decimals, step=step) for v in ticks]


def _format_tick(value: float, *, decimals: int, step: float | None) -> str:
    if not math.isfinite(value):
        return str(value)
    if step and abs(value) <= step * 1e-9:
        value = 0.0
    if value != 0 and not 1e-6 <= abs(value) < 1e6:
        return f"{value:.4e}"
    out = f"{value:.{decimals}f}"
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    return "0" if out == "-0" else out


# (fraction bound, nice fraction); rounding uses strict bounds, covering uses inclusive ones.
_NICE_FRACTIONS = ((1.5, 1.0, 1.0), (3.0, 2.0, 2.0), (7.0, 5.0, 5.0))


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = math.floor(math.log10(value))
    frac = value / 10.0**exp
    for round_bound, cover_bound, nice in _NICE_FRACTIONS:
        if (frac < round_bound) if round_result else (frac <= cover_bound):
            return nice * 10.0**exp
    return 10.0 * 10.0**exp


def _decimals_for_step(step: float | None) -> int:
    if step is None or step <= 0 or not math.isfinite(step):
        return 6
    exponent = Decimal(repr(step)).normalize().as_tuple().exponent
    return min(12, max(0, -int(exponent)))
