from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Any

from luvatrix_heatmap.domains import resolve_fill_domain
from luvatrix_heatmap.palettes import PaletteSpec, parse_color
from luvatrix_heatmap.scales import DAY_MS


DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 400
DEFAULT_MIN_WIDTH = 375
DEFAULT_COLUMNS_RATIO = 8.0 / 12.0
DEFAULT_COLUMN_WIDTH = 1200


@dataclass(frozen=True)
class Margins:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class HeatmapOptions:
    """Every recognised heatmap option with its default.

    Domains left as ``None`` are derived from the data. ``inset_*`` left as
    ``None`` fall back to ``inset``. ``halo``/``halo_width``/``stroke_width``
    are passed through to the rendering backend untouched.
    """

    margin_top: float = 20
    margin_right: float = 0
    margin_bottom: float = 40
    margin_left: float = 40
    inset: float = 3
    inset_top: float | None = None
    inset_right: float | None = None
    inset_bottom: float | None = None
    inset_left: float | None = None
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    min_width: float = DEFAULT_MIN_WIDTH
    columns_ratio: float = DEFAULT_COLUMNS_RATIO
    column_width: float = DEFAULT_COLUMN_WIDTH
    rect_y_padding: float = 4
    x_interval_ms: float = DAY_MS

    # None selects "time" for temporal x domains and "linear" otherwise.
    x_type: Any = None
    x_domain: Sequence[Any] | None = None
    y_type: Any = "band"
    y_domain: Sequence[Any] | None = None
    fill_type: Any = "linear"
    # A None middle stop centres the fill scale on the extent of the other two.
    fill_domain: Sequence[float | None] | None = None
    fill_range: Sequence[float] = (0.0, 0.5, 1.0)
    fill_palette: PaletteSpec = "cividis"
    fill_unknown: Any = None
    target_limit: float | None = None

    x_label: str | None = None
    y_label: str | None = None
    x_format: str | None = None
    y_format: str | None = None
    x_tick_spacing: float = 80
    y_tick_spacing: float = 50

    font_size: float = 14
    font_tick_reducer: float = 0.9
    stroke_width: float = 0.5
    halo: str = "#fff"
    halo_width: float = 3

    def __post_init__(self) -> None:
        for name in ("width", "height", "min_width", "column_width", "x_interval_ms", "font_size"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")
        for name in ("x_tick_spacing", "y_tick_spacing"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")
        for name in ("rect_y_padding", "stroke_width", "halo_width", "font_tick_reducer"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if not 0 < self.columns_ratio <= 1:
            raise ValueError("columns_ratio must be in (0, 1]")
        if len(self.fill_range) < 2:
            raise ValueError("fill_range must have at least two stops")
        if self.fill_domain is not None and len(self.fill_domain) != len(self.fill_range):
            raise ValueError("fill_domain and fill_range must have the same number of stops")
        if self.fill_domain is not None:
            resolve_fill_domain(self.fill_domain)
        if self.x_domain is not None and len(self.x_domain) != 2:
            raise ValueError("x_domain must be a [min, max] pair")
        parse_color(self.halo)

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any] | None = None) -> "HeatmapOptions":
        known = {f.name for f in fields(cls)}
        raw: dict[str, Any] = {}
        if overrides:
            for key, value in overrides.items():
                if key not in known:
                    raise ValueError(f"Unknown heatmap option: {key}")
                raw[key] = value
        return cls(**raw)

    @property
    def margins(self) -> Margins:
        return Margins(top=self.margin_top, right=self.margin_right, bottom=self.margin_bottom, left=self.margin_left)

    @property
    def insets(self) -> Margins:
        return Margins(
            top=self.inset if self.inset_top is None else self.inset_top,
            right=self.inset if self.inset_right is None else self.inset_right,
            bottom=self.inset if self.inset_bottom is None else self.inset_bottom,
            left=self.inset if self.inset_left is None else self.inset_left,
        )

    def resolve_width(self, screen_width: float | None = None) -> float:
        """Output width for a host display ``screen_width`` pixels wide.

        ``None`` means no display is known (tests, server-side rendering); the
        width is then only raised to ``min_width``.
        """
        if screen_width is not None and screen_width >= self.column_width:
            return self.width * self.columns_ratio
        if self.width < self.min_width:
            return self.min_width
        return self.width
