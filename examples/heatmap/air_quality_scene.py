from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
from pathlib import Path

from luvatrix_heatmap import heatmap


def _records() -> list[dict[str, object]]:
    start = dt.date(2024, 1, 1)
    species = ("O3", "SO2", "NO2", "PM10")
    out: list[dict[str, object]] = []
    for day in range(14):
        for k, name in enumerate(species):
            out.append(
                {
                    "day": start + dt.timedelta(days=day),
                    "species": name,
                    "value": float((day * 7 + k * 23) % 100),
                }
            )
    return out


def main() -> None:
    parser = argparse.ArgumentParser(description="Build an air-quality heatmap scene and dump it as JSON")
    parser.add_argument("--out", type=Path, default=None, help="write JSON here instead of stdout")
    parser.add_argument("--screen-width", type=int, default=None, help="host display width for responsive sizing")
    parser.add_argument("--target", type=float, default=40.0)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    scene = heatmap(
        _records(),
        x="day",
        y="species",
        fill="value",
        title=lambda r: f"{r['species']} {r['day']}: {r['value']}",
        screen_width=args.screen_width,
        target_limit=args.target,
        x_label="day",
        y_label="species",
    )
    payload = json.dumps(scene.to_dict(), indent=2)
    if args.out is None:
        print(payload)
    else:
        args.out.write_text(payload, encoding="utf-8")


if __name__ == "__main__":
    main()
