from luvatrix_heatmap.api import heatmap
from luvatrix_heatmap.axes import AxisDescriptor, Tick
from luvatrix_heatmap.config import HeatmapOptions, Margins
from luvatrix_heatmap.domains import Domains, derive_domains
from luvatrix_heatmap.errors import (
    AccessorError,
    EmptyDomainError,
    HeatmapDataError,
    InvalidGeometryDomainError,
    UnknownCategoryError,
)
from luvatrix_heatmap.geometry import TileGeometry
from luvatrix_heatmap.palettes import cividis
from luvatrix_heatmap.scales import BandScale, ColorScale, LinearScale, PiecewiseScale, TimeScale
from luvatrix_heatmap.scene import Scene, Tile, build_heatmap
from luvatrix_heatmap.series import ExtractedSeries, extract_series

__all__ = [
    "AccessorError",
    "AxisDescriptor",
    "BandScale",
    "ColorScale",
    "Domains",
    "EmptyDomainError",
    "ExtractedSeries",
    "HeatmapDataError",
    "HeatmapOptions",
    "InvalidGeometryDomainError",
    "LinearScale",
    "Margins",
    "PiecewiseScale",
    "Scene",
    "Tick",
    "Tile",
    "TileGeometry",
    "TimeScale",
    "UnknownCategoryError",
    "build_heatmap",
    "cividis",
    "derive_domains",
    "extract_series",
    "heatmap",
]
