from __future__ import annotations


class HeatmapDataError(ValueError):
    """Base class for data-dependent heatmap failures."""


class EmptyDomainError(HeatmapDataError):
    """Raised when a continuous domain cannot be derived from an empty series."""

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"cannot derive {channel} domain from an empty series")


class InvalidGeometryDomainError(HeatmapDataError):
    """Raised when the x domain does not span a positive, finite number of tile units."""

    def __init__(self, unit_count: float):
        self.unit_count = unit_count
        super().__init__(f"x domain spans {unit_count!r} tile units; expected a positive finite count")


class UnknownCategoryError(HeatmapDataError):
    def __init__(self, value: object, index: int):
        self.value = value
        self.index = index
        super().__init__(f"y value {value!r} at record {index} is not in the y domain")


class AccessorError(HeatmapDataError):
    """Raised when a built-in key/index accessor cannot read a record."""

    def __init__(self, channel: str, index: int, reason: str):
        self.channel = channel
        self.index = index
        super().__init__(f"{channel} accessor failed on record {index}: {reason}")
