from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from luvatrix_heatmap.errors import EmptyDomainError
from luvatrix_heatmap.series import ExtractedSeries
from luvatrix_heatmap.values import is_missing, is_temporal, to_number


@dataclass(frozen=True)
class Domains:
    x: tuple[Any, ...]
    y: tuple[Any, ...]
    fill: tuple[float, ...]

    @property
    def x_is_temporal(self) -> bool:
        return any(is_temporal(v) for v in self.x)


def derive_x_domain(values: Sequence[Any]) -> tuple[Any, Any]:
    defined = [v for v in values if not is_missing(v)]
    if not defined:
        raise EmptyDomainError("x")
    return (min(defined, key=_x_key), max(defined, key=_x_key))


def _x_key(value: Any) -> float:
    return to_number(value, label="x value")


def derive_y_domain(values: Sequence[Any]) -> tuple[Any, ...]:
    """Distinct y values in order of first occurrence."""
    return tuple(dict.fromkeys(values))


def derive_fill_domain(values: Sequence[Any], target: float | None = None, *, stops: int = 3) -> tuple[float, ...]:
    numbers = [to_number(v, label="fill value") for v in values if not is_missing(v)]
    if not numbers:
        raise EmptyDomainError("fill")
    lo = min(numbers)
    hi = max(numbers)
    if stops == 2:
        return (lo, hi)
    if stops != 3:
        raise ValueError("a derived fill domain has 2 or 3 stops; pass fill_domain explicitly")
    if target is None:
        return (lo, (lo + hi) / 2.0, hi)
    mid = float(target)
    return (min(lo, mid), mid, max(hi, mid))


def resolve_fill_domain(stops: Sequence[float | None]) -> tuple[float, ...]:
    """Coerce explicit fill stops; a missing middle stop of a 3-stop domain centres on the extent."""
    if len(stops) == 3 and stops[1] is None and stops[0] is not None and stops[2] is not None:
        lo = float(stops[0])
        hi = float(stops[2])
        return (lo, (lo + hi) / 2.0, hi)
    if any(v is None for v in stops):
        raise ValueError(f"only the middle stop of a 3-stop fill_domain may be None: {tuple(stops)!r}")
    return tuple(float(v) for v in stops)


def derive_domains(
    series: ExtractedSeries,
    *,
    x_domain: Sequence[Any] | None = None,
    y_domain: Sequence[Any] | None = None,
    fill_domain: Sequence[float | None] | None = None,
    target_limit: float | None = None,
    fill_stops: int = 3,
) -> Domains:
    """Resolve all three domains; an explicit domain replaces the derived one entirely."""
    x = tuple(x_domain) if x_domain is not None else derive_x_domain(series.x)
    y = tuple(y_domain) if y_domain is not None else derive_y_domain(series.y)
    if fill_domain is not None:
        fill = resolve_fill_domain(fill_domain)
    else:
        fill = derive_fill_domain(series.fill, target_limit, stops=fill_stops)
    return Domains(x=x, y=y, fill=fill)
