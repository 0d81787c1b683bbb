from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import datetime as dt
import logging
import math
from typing import Any

import numpy as np

from luvatrix_heatmap.axes import AxisDescriptor, build_x_axis, build_y_axis
from luvatrix_heatmap.config import HeatmapOptions, Margins
from luvatrix_heatmap.domains import Domains, derive_domains
from luvatrix_heatmap.errors import UnknownCategoryError
from luvatrix_heatmap.geometry import TileGeometry, compute_geometry
from luvatrix_heatmap.palettes import Color, parse_color, resolve_palette, to_hex
from luvatrix_heatmap.scales import (
    FILL_SCALE_TYPES,
    X_SCALE_TYPES,
    Y_SCALE_TYPES,
    ColorScale,
    Scale,
    resolve_scale_factory,
)
from luvatrix_heatmap.series import Accessor, ExtractedSeries, extract_series


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tile:
    index: int
    x: float
    y: float
    width: float
    height: float
    fill: Color | Any
    stroke: Color | Any
    title: str | None = None


@dataclass(frozen=True)
class Scales:
    x: Scale
    y: Scale
    fill: ColorScale


@dataclass(frozen=True)
class Scene:
    """Everything a rendering backend needs to draw one heatmap."""

    width: float
    height: float
    margins: Margins
    insets: Margins
    domains: Domains
    geometry: TileGeometry
    x_axis: AxisDescriptor
    y_axis: AxisDescriptor
    tiles: tuple[Tile, ...]
    stroke_width: float
    halo: Color
    halo_width: float
    font_size: float

    @property
    def view_box(self) -> tuple[float, float, float, float]:
        return (0.0, 0.0, self.width, self.height)

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "view_box": list(self.view_box),
            "margins": _edges_to_dict(self.margins),
            "insets": _edges_to_dict(self.insets),
            "tile_width": _finite(self.geometry.tile_width),
            "tile_height": self.geometry.tile_height,
            "stroke_width": self.stroke_width,
            "halo": to_hex(self.halo),
            "halo_width": self.halo_width,
            "font_size": self.font_size,
            "x_axis": _axis_to_dict(self.x_axis),
            "y_axis": _axis_to_dict(self.y_axis),
            "tiles": [
                {
                    "index": tile.index,
                    "x": _finite(tile.x),
                    "y": _finite(tile.y),
                    "width": _finite(tile.width),
                    "height": _finite(tile.height),
                    "fill": _color_to_json(tile.fill),
                    "stroke": _color_to_json(tile.stroke),
                    "title": tile.title,
                }
                for tile in self.tiles
            ],
        }


def _edges_to_dict(edges: Margins) -> dict[str, float]:
    return {"top": edges.top, "right": edges.right, "bottom": edges.bottom, "left": edges.left}


def _axis_to_dict(axis: AxisDescriptor) -> dict[str, Any]:
    return {
        "orient": axis.orient,
        "tick_count": axis.tick_count,
        "format": axis.format,
        "label": axis.label,
        "ticks": [{"value": _jsonable(t.value), "position": _finite(t.position), "label": t.label} for t in axis.ticks],
        "offset": list(axis.offset),
        "grid_length": axis.grid_length,
        "label_position": list(axis.label_position),
        "label_anchor": axis.label_anchor,
        "font_size": axis.font_size,
        "tick_font_size": axis.tick_font_size,
        "show_domain_line": axis.show_domain_line,
    }


def _finite(value: float) -> float | None:
    # NaN positions come from missing x values; strict JSON has no NaN.
    return value if math.isfinite(value) else None


def _color_to_json(color: Any) -> Any:
    if isinstance(color, tuple) and len(color) == 4:
        return to_hex(color)
    return color


def _jsonable(value: Any) -> Any:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, float):
        return _finite(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def compute_ranges(options: HeatmapOptions, width: float) -> tuple[tuple[float, float], tuple[float, float]]:
    """Pixel ranges for x (left to right) and y (bottom to top)."""
    margins = options.margins
    insets = options.insets
    x_range = (margins.left + insets.left, width - margins.right - insets.right)
    y_range = (options.height - margins.bottom - insets.bottom, margins.top + insets.top)
    if x_range[1] <= x_range[0]:
        raise ValueError(f"plot area has no width: x range {x_range!r}")
    if y_range[0] <= y_range[1]:
        raise ValueError(f"plot area has no height: y range {y_range!r}")
    return x_range, y_range


def build_scales(
    domains: Domains,
    options: HeatmapOptions,
    *,
    x_range: tuple[float, float],
    y_range: tuple[float, float],
) -> Scales:
    x_type = options.x_type
    if x_type is None:
        x_type = "time" if domains.x_is_temporal else "linear"
    x_factory = resolve_scale_factory(x_type, X_SCALE_TYPES, kind="x")
    y_factory = resolve_scale_factory(options.y_type, Y_SCALE_TYPES, kind="y")
    fill_factory = resolve_scale_factory(options.fill_type, FILL_SCALE_TYPES, kind="fill")

    unknown = options.fill_unknown
    if unknown is not None:
        unknown = parse_color(unknown)
    fill = ColorScale(
        unit=fill_factory(domains.fill, tuple(options.fill_range)),
        palette=resolve_palette(options.fill_palette),
        unknown=unknown,
    )
    return Scales(x=x_factory(domains.x, x_range), y=y_factory(domains.y, y_range), fill=fill)


def assemble_tiles(series: ExtractedSeries, scales: Scales, geometry: TileGeometry) -> tuple[Tile, ...]:
    x_positions = np.asarray([scales.x(v) for v in series.x], dtype=np.float64)
    tiles: list[Tile] = []
    for i in series.index.tolist():
        y_pos = scales.y(series.y[i])
        if y_pos is None:
            raise UnknownCategoryError(series.y[i], i)
        color = scales.fill(series.fill[i])
        tiles.append(
            Tile(
                index=i,
                x=float(x_positions[i]),
                y=float(y_pos) + geometry.y_padding,
                width=geometry.tile_width,
                height=geometry.tile_height,
                fill=color,
                stroke=color,
                title=None if series.title is None else series.title[i],
            )
        )
    return tuple(tiles)


def build_heatmap(
    data: Any,
    options: HeatmapOptions | Mapping[str, Any] | None = None,
    *,
    x: Accessor | None = None,
    y: Accessor | None = None,
    fill: Accessor | None = None,
    title: Accessor | None = None,
    screen_width: float | None = None,
) -> Scene:
    """Run the full pipeline: records -> series -> domains -> scales -> geometry -> scene.

    ``screen_width`` is the host display width used for responsive sizing;
    leave it ``None`` outside an interactive display.
    """
    if options is None:
        options = HeatmapOptions()
    elif not isinstance(options, HeatmapOptions):
        options = HeatmapOptions.from_mapping(options)

    width = options.resolve_width(screen_width)
    height = options.height
    x_range, y_range = compute_ranges(options, width)

    series = extract_series(data, x=x, y=y, fill=fill, title=title)
    LOGGER.debug("extracted %d records", len(series))

    domains = derive_domains(
        series,
        x_domain=options.x_domain,
        y_domain=options.y_domain,
        fill_domain=options.fill_domain,
        target_limit=options.target_limit,
        fill_stops=len(options.fill_range),
    )
    LOGGER.debug(
        "x domain %r -> %r; y domain %r -> %r; fill domain %r -> %r",
        domains.x,
        x_range,
        domains.y,
        y_range,
        domains.fill,
        tuple(options.fill_range),
    )

    scales = build_scales(domains, options, x_range=x_range, y_range=y_range)
    geometry = compute_geometry(
        scales.x,
        scales.y,
        rect_y_padding=options.rect_y_padding,
        interval_ms=options.x_interval_ms,
    )
    LOGGER.debug("tile width %.3f over %.3f units; tile height %.3f", geometry.tile_width, geometry.unit_count, geometry.tile_height)

    return Scene(
        width=float(width),
        height=float(height),
        margins=options.margins,
        insets=options.insets,
        domains=domains,
        geometry=geometry,
        x_axis=build_x_axis(scales.x, options, width=width, height=height),
        y_axis=build_y_axis(scales.y, options, width=width, height=height),
        tiles=assemble_tiles(series, scales, geometry),
        stroke_width=float(options.stroke_width),
        halo=parse_color(options.halo),
        halo_width=float(options.halo_width),
        font_size=float(options.font_size),
    )
