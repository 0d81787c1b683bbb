from __future__ import annotations

from typing import Any

from luvatrix_heatmap.config import HeatmapOptions
from luvatrix_heatmap.scene import Scene, build_heatmap
from luvatrix_heatmap.series import Accessor


def heatmap(
    data: Any,
    *,
    x: Accessor | None = None,
    y: Accessor | None = None,
    fill: Accessor | None = None,
    title: Accessor | None = None,
    screen_width: float | None = None,
    **options: Any,
) -> Scene:
    return build_heatmap(
        data,
        HeatmapOptions.from_mapping(options),
        x=x,
        y=y,
        fill=fill,
        title=title,
        screen_width=screen_width,
    )
