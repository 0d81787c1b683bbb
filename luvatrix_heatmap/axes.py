from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

import numpy as np

from luvatrix_heatmap.config import HeatmapOptions
from luvatrix_heatmap.scales import Scale


@dataclass(frozen=True)
class Tick:
    value: Any
    position: float
    label: str


@dataclass(frozen=True)
class AxisDescriptor:
    """Tick and label layout for one axis, in scene pixel coordinates.

    ``offset`` is the translation of the axis group; ``grid_length`` is the
    signed length of the faint grid line drawn from each tick across the plot.
    """

    orient: Literal["bottom", "left"]
    scale: Scale
    tick_count: int
    ticks: tuple[Tick, ...]
    format: str | None
    label: str | None
    offset: tuple[float, float]
    grid_length: float
    label_position: tuple[float, float]
    label_anchor: Literal["start", "end"]
    font_size: float
    tick_font_size: float
    show_domain_line: bool = True


def tick_count_for_extent(extent: float, spacing: float) -> int:
    return max(1, int(extent / spacing))


def build_ticks(scale: Scale, count: int, fmt: str | None) -> tuple[Tick, ...]:
    if hasattr(scale, "bandwidth"):
        half = float(scale.bandwidth) / 2.0
        return tuple(
            Tick(value=value, position=float(scale(value)) + half, label=_format_category(value, fmt))
            for value in scale.domain
        )
    if not hasattr(scale, "ticks"):
        return ()
    values = np.asarray(scale.ticks(count), dtype=np.float64)
    if hasattr(scale, "tick_labels"):
        labels = scale.tick_labels(values, fmt)
    else:
        labels = [_format_category(float(v), fmt) for v in values]
    return tuple(Tick(value=float(v), position=float(scale(float(v))), label=label) for v, label in zip(values, labels))


def _format_category(value: Any, fmt: str | None) -> str:
    if fmt is None:
        return str(value)
    if "%" in fmt:
        return value.strftime(fmt) if hasattr(value, "strftime") else str(value)
    return format(value, fmt)


def build_x_axis(scale: Scale, options: HeatmapOptions, *, width: float, height: float) -> AxisDescriptor:
    count = tick_count_for_extent(width, options.x_tick_spacing)
    return AxisDescriptor(
        orient="bottom",
        scale=scale,
        tick_count=count,
        ticks=build_ticks(scale, count, options.x_format),
        format=options.x_format,
        label=options.x_label,
        offset=(0.0, float(height - options.margin_bottom)),
        grid_length=float(options.margin_top + options.margin_bottom - height),
        label_position=(float(width), float(options.margin_bottom - 4)),
        label_anchor="end",
        font_size=float(options.font_size),
        tick_font_size=float(options.font_size * options.font_tick_reducer),
    )


def build_y_axis(scale: Scale, options: HeatmapOptions, *, width: float, height: float) -> AxisDescriptor:
    count = tick_count_for_extent(height, options.y_tick_spacing)
    return AxisDescriptor(
        orient="left",
        scale=scale,
        tick_count=count,
        ticks=build_ticks(scale, count, options.y_format),
        format=options.y_format,
        label=options.y_label,
        offset=(float(options.margin_left), 0.0),
        grid_length=float(width - options.margin_left - options.margin_right),
        label_position=(float(-options.margin_left), 10.0),
        label_anchor="start",
        font_size=float(options.font_size),
        tick_font_size=float(options.font_size * options.font_tick_reducer),
        show_domain_line=False,
    )
