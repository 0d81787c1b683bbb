from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
import math
from typing import Any

from luvatrix_heatmap.errors import InvalidGeometryDomainError
from luvatrix_heatmap.scales import DAY_MS, Scale
from luvatrix_heatmap.values import to_number


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileGeometry:
    tile_width: float
    tile_height: float
    y_padding: float
    unit_count: float


def count_units(x_domain: Sequence[Any], interval_ms: float = DAY_MS) -> float:
    """Number of ``interval_ms`` units (days by default) spanned by a temporal x domain."""
    if len(x_domain) != 2:
        raise ValueError("x domain must be a [min, max] pair")
    lo = to_number(x_domain[0], label="x domain value")
    hi = to_number(x_domain[1], label="x domain value")
    return (hi - lo) / float(interval_ms)


def compute_tile_width(x_domain: Sequence[Any], x_range: Sequence[float], interval_ms: float = DAY_MS) -> tuple[float, float]:
    units = count_units(x_domain, interval_ms)
    if not math.isfinite(units) or units <= 0:
        raise InvalidGeometryDomainError(units)
    return (float(x_range[1]) - float(x_range[0])) / units, units


def compute_tile_height(step: float, padding: float) -> float:
    height = float(step) - 2.0 * float(padding)
    if height < 0:
        LOGGER.warning("tile padding %s exceeds half the band step %s; clamping tile height to 0", padding, step)
        return 0.0
    return height


def compute_geometry(
    x_scale: Scale,
    y_scale: Scale,
    *,
    rect_y_padding: float,
    interval_ms: float = DAY_MS,
) -> TileGeometry:
    step = getattr(y_scale, "step", None)
    if step is None:
        raise ValueError("y scale must expose a band step")
    tile_width, units = compute_tile_width(x_scale.domain, x_scale.range, interval_ms)
    return TileGeometry(
        tile_width=tile_width,
        tile_height=compute_tile_height(step, rect_y_padding),
        y_padding=float(rect_y_padding),
        unit_count=units,
    )
