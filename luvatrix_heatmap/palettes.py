from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Union

import numpy as np
from PIL import ImageColor


Color = tuple[int, int, int, int]
Palette = Callable[[float], Color]
PaletteSpec = Union[str, Palette, Sequence[str]]


def _channel(value: float) -> int:
    # Round half away from zero so palette output matches the reference tables.
    return int(max(0, min(255, np.floor(value + 0.5))))


def cividis(t: float) -> Color:
    """Colour-vision-deficiency friendly blue-to-yellow ramp for ``t`` in [0, 1]."""
    t = max(0.0, min(1.0, float(t)))
    r = -4.54 - t * (35.34 - t * (2381.73 - t * (6402.7 - t * (7024.72 - t * 2710.57))))
    g = 32.49 + t * (170.73 + t * (52.82 - t * (131.46 - t * (176.58 - t * 67.37))))
    b = 81.24 + t * (442.36 - t * (2482.43 - t * (6167.24 - t * (6614.94 - t * 2475.67))))
    return (_channel(r), _channel(g), _channel(b), 255)


def parse_color(value: str | Sequence[int]) -> Color:
    if isinstance(value, str):
        rgb = ImageColor.getrgb(value)
    else:
        rgb = tuple(int(v) for v in value)
    if len(rgb) == 3:
        r, g, b = rgb
        return (r, g, b, 255)
    if len(rgb) == 4:
        r, g, b, a = rgb
        return (r, g, b, a)
    raise ValueError(f"color must have 3 or 4 channels: {value!r}")


def to_hex(color: Color) -> str:
    r, g, b, a = color
    if a == 255:
        return f"#{r:02x}{g:02x}{b:02x}"
    return f"#{r:02x}{g:02x}{b:02x}{a:02x}"


def palette_from_colors(colors: Sequence[str | Sequence[int]]) -> Palette:
    """Piecewise-linear RGB ramp through evenly spaced colour stops."""
    if len(colors) < 2:
        raise ValueError("a palette needs at least two colors")
    stops = np.asarray([parse_color(c) for c in colors], dtype=np.float64)
    positions = np.linspace(0.0, 1.0, len(colors), dtype=np.float64)

    def palette(t: float) -> Color:
        t = max(0.0, min(1.0, float(t)))
        channels = [np.interp(t, positions, stops[:, k]) for k in range(4)]
        return tuple(_channel(c) for c in channels)  # type: ignore[return-value]

    return palette


PALETTES: dict[str, Palette] = {
    "cividis": cividis,
    "rdbu": palette_from_colors(["#2166ac", "#f7f7f7", "#b2182b"]),
    "greens": palette_from_colors(["#f7fcf5", "#74c476", "#00441b"]),
}


def resolve_palette(spec: PaletteSpec) -> Palette:
    if isinstance(spec, str):
        try:
            return PALETTES[spec.lower()]
        except KeyError:
            raise ValueError(f"unknown palette: {spec}") from None
    if callable(spec):
        return spec
    return palette_from_colors(spec)
