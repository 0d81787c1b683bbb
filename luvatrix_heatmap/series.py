from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Union

import numpy as np

from luvatrix_heatmap.errors import AccessorError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


Accessor = Union[Callable[[Any], Any], str, int]


@dataclass(frozen=True)
class FieldAccessor:
    """Built-in accessor reading ``record[key]``.

    Failures are reported as :class:`AccessorError`; user callables are never
    wrapped this way.
    """

    key: Any

    def __call__(self, record: Any) -> Any:
        return record[self.key]


# Defaults assume ``(x, y)`` or ``(x, y, fill)`` tuples. Fill reads the second
# element too, so 3-tuples need an explicit fill accessor or y and fill alias.
DEFAULT_X = FieldAccessor(0)
DEFAULT_Y = FieldAccessor(1)
DEFAULT_FILL = FieldAccessor(1)


@dataclass(frozen=True, eq=False)
class ExtractedSeries:
    x: tuple[Any, ...]
    y: tuple[Any, ...]
    fill: tuple[Any, ...]
    index: np.ndarray
    title: tuple[Any, ...] | None = None

    def __len__(self) -> int:
        return int(self.index.size)


def resolve_accessor(accessor: Accessor | None, default: FieldAccessor) -> Callable[[Any], Any]:
    if accessor is None:
        return default
    if isinstance(accessor, (str, int)) and not isinstance(accessor, bool):
        return FieldAccessor(accessor)
    if not callable(accessor):
        raise ValueError(f"accessor must be callable, a key or an index; got {type(accessor)!r}")
    return accessor


def as_records(data: Any) -> list[Any]:
    if pd is not None and isinstance(data, pd.DataFrame):
        return data.to_dict(orient="records")
    if data is None:
        raise ValueError("data is required")
    if isinstance(data, (str, bytes, bytearray)) or not isinstance(data, Iterable):
        raise ValueError(f"data must be an iterable of records; got {type(data)!r}")
    return list(data)


def extract_channel(records: list[Any], accessor: Callable[[Any], Any], *, channel: str) -> tuple[Any, ...]:
    if not isinstance(accessor, FieldAccessor):
        return tuple(accessor(record) for record in records)

    out: list[Any] = []
    for i, record in enumerate(records):
        try:
            out.append(accessor(record))
        except (IndexError, KeyError, TypeError) as exc:
            raise AccessorError(channel, i, f"cannot read {accessor.key!r}: {exc}") from exc
    return tuple(out)


def extract_series(
    data: Any,
    *,
    x: Accessor | None = None,
    y: Accessor | None = None,
    fill: Accessor | None = None,
    title: Accessor | None = None,
) -> ExtractedSeries:
    records = as_records(data)
    x_values = extract_channel(records, resolve_accessor(x, DEFAULT_X), channel="x")
    y_values = extract_channel(records, resolve_accessor(y, DEFAULT_Y), channel="y")
    fill_values = extract_channel(records, resolve_accessor(fill, DEFAULT_FILL), channel="fill")
    title_values = None
    if title is not None:
        title_accessor = resolve_accessor(title, FieldAccessor(None))
        title_values = tuple(
            None if value is None else str(value)
            for value in extract_channel(records, title_accessor, channel="title")
        )

    index = np.arange(len(records), dtype=np.int64)
    index.flags.writeable = False
    return ExtractedSeries(x=x_values, y=y_values, fill=fill_values, index=index, title=title_values)
