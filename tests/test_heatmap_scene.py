from __future__ import annotations

import datetime as dt
import json
import unittest
from unittest import mock

from luvatrix_heatmap import (
    EmptyDomainError,
    HeatmapOptions,
    InvalidGeometryDomainError,
    LinearScale,
    TimeScale,
    UnknownCategoryError,
    build_heatmap,
    heatmap,
)
from luvatrix_heatmap.palettes import cividis
from luvatrix_heatmap.scales import DAY_MS


def _air_quality() -> list[dict[str, object]]:
    return [
        {"day": dt.date(2024, 1, 1), "species": "O3", "value": 10},
        {"day": dt.date(2024, 1, 2), "species": "O3", "value": 50},
        {"day": dt.date(2024, 1, 1), "species": "SO2", "value": 90},
    ]


def _build(**options: object):
    return build_heatmap(_air_quality(), options, x="day", y="species", fill="value")


class SceneAssemblerTests(unittest.TestCase):
    def test_air_quality_scenario(self) -> None:
        scene = _build(target_limit=40)
        self.assertEqual(scene.domains.y, ("O3", "SO2"))
        self.assertEqual(scene.domains.fill, (10.0, 40.0, 90.0))
        self.assertEqual(len(scene.tiles), 3)
        # One day spanned: a tile covers the whole x range (637 - 43).
        self.assertEqual(scene.geometry.tile_width, 594.0)
        self.assertIsInstance(scene.x_axis.scale, TimeScale)

        o3_first, o3_second, so2 = scene.tiles
        self.assertEqual(o3_first.x, 43.0)
        self.assertEqual(o3_second.x, 637.0)
        self.assertEqual(o3_first.y, 194.0)
        self.assertEqual(so2.y, 27.0)
        self.assertEqual(o3_first.height, 159.0)
        self.assertEqual(o3_first.fill, (0, 32, 81, 255))
        self.assertEqual(so2.fill, (253, 234, 69, 255))
        for tile in scene.tiles:
            self.assertEqual(tile.fill, tile.stroke)
            self.assertEqual(tile.width, 594.0)

    def test_build_is_deterministic(self) -> None:
        first = json.dumps(_build(target_limit=40).to_dict(), sort_keys=True)
        second = json.dumps(_build(target_limit=40).to_dict(), sort_keys=True)
        self.assertEqual(first, second)

    def test_every_record_becomes_one_tile_within_ranges(self) -> None:
        data = [
            {"day": dt.date(2024, 1, 1) + dt.timedelta(days=d), "species": s, "value": d * 3 + k}
            for d in range(10)
            for k, s in enumerate(("O3", "SO2", "NO2"))
        ]
        scene = build_heatmap(data, x="day", y="species", fill="value")
        self.assertEqual(len(scene.tiles), len(data))
        self.assertEqual([t.index for t in scene.tiles], list(range(len(data))))
        for tile in scene.tiles:
            self.assertGreaterEqual(tile.x, 43.0)
            self.assertLessEqual(tile.x, 637.0)
            self.assertGreaterEqual(tile.y, 23.0)
            self.assertLessEqual(tile.y + tile.height, 357.0)

    def test_empty_data_fails_before_scales_are_built(self) -> None:
        with mock.patch("luvatrix_heatmap.scene.build_scales") as build_scales:
            with self.assertRaises(EmptyDomainError):
                build_heatmap([])
        build_scales.assert_not_called()

    def test_explicit_domains_are_not_recomputed(self) -> None:
        x_domain = (dt.date(2023, 12, 31), dt.date(2024, 1, 4))
        y_domain = ("SO2", "O3", "NO2")
        with mock.patch("luvatrix_heatmap.domains.derive_x_domain") as derive_x, mock.patch(
            "luvatrix_heatmap.domains.derive_y_domain"
        ) as derive_y:
            scene = _build(x_domain=x_domain, y_domain=y_domain)
        derive_x.assert_not_called()
        derive_y.assert_not_called()
        self.assertEqual(scene.domains.x, x_domain)
        self.assertEqual(scene.x_axis.scale.domain, x_domain)
        self.assertEqual(scene.y_axis.scale.domain, y_domain)
        self.assertEqual(scene.geometry.tile_width, 594.0 / 4)

    def test_y_value_outside_explicit_domain_raises(self) -> None:
        with self.assertRaises(UnknownCategoryError) as ctx:
            _build(y_domain=("O3",))
        self.assertEqual(ctx.exception.value, "SO2")
        self.assertEqual(ctx.exception.index, 2)

    def test_single_day_domain_raises_geometry_error(self) -> None:
        with self.assertRaises(InvalidGeometryDomainError):
            build_heatmap([(dt.date(2024, 1, 1), "O3", 1.0)], fill=2)

    def test_numeric_x_uses_linear_scale(self) -> None:
        scene = build_heatmap([(0, "a", 1.0), (2 * DAY_MS, "b", 2.0)], fill=2)
        self.assertIsInstance(scene.x_axis.scale, LinearScale)
        self.assertNotIsInstance(scene.x_axis.scale, TimeScale)
        self.assertEqual(scene.geometry.tile_width, 297.0)

    def test_screen_width_is_injected(self) -> None:
        narrow = build_heatmap(_air_quality(), x="day", y="species", fill="value")
        wide = build_heatmap(_air_quality(), x="day", y="species", fill="value", screen_width=1440)
        self.assertEqual(narrow.width, 640.0)
        self.assertAlmostEqual(wide.width, 640 * 8 / 12)
        self.assertLess(wide.geometry.tile_width, narrow.geometry.tile_width)

    def test_titles_are_attached_to_tiles(self) -> None:
        scene = build_heatmap(_air_quality(), x="day", y="species", fill="value", title="species")
        self.assertEqual([t.title for t in scene.tiles], ["O3", "O3", "SO2"])

    def test_to_dict_is_json_ready(self) -> None:
        payload = _build(target_limit=40, x_label="day").to_dict()
        self.assertEqual(payload["tiles"][0]["fill"], "#002051")
        self.assertEqual(payload["halo"], "#ffffff")
        self.assertEqual(payload["view_box"], [0.0, 0.0, 640.0, 400.0])
        self.assertEqual(payload["x_axis"]["label"], "day")
        self.assertEqual([t["label"] for t in payload["y_axis"]["ticks"]], ["O3", "SO2"])
        json.dumps(payload)

    def test_explicit_fill_domain_without_middle_stop(self) -> None:
        data = _air_quality()[:2]
        scene = build_heatmap(data, {"fill_domain": (0, None, 100)}, x="day", y="species", fill="value")
        self.assertEqual(scene.domains.fill, (0.0, 50.0, 100.0))
        self.assertEqual(len(scene.tiles), 2)

    def test_constant_fill_values_use_middle_color(self) -> None:
        data = [(dt.date(2024, 1, 1), "O3", 5.0), (dt.date(2024, 1, 2), "SO2", 5.0)]
        scene = build_heatmap(data, fill=2)
        self.assertEqual(scene.domains.fill, (5.0, 5.0, 5.0))
        for tile in scene.tiles:
            self.assertEqual(tile.fill, cividis(0.5))

    def test_missing_x_serialises_as_null(self) -> None:
        data = [(dt.date(2024, 1, 1), "O3", 1.0), (dt.date(2024, 1, 3), "O3", 2.0), (None, "O3", 3.0)]
        payload = build_heatmap(data, fill=2).to_dict()
        self.assertIsNone(payload["tiles"][2]["x"])
        self.assertEqual(payload["tiles"][0]["x"], 43.0)
        json.dumps(payload, allow_nan=False)

    def test_debug_logging_reports_domains(self) -> None:
        with self.assertLogs("luvatrix_heatmap.scene", level="DEBUG") as logs:
            _build(target_limit=40)
        self.assertTrue(any("y domain" in line for line in logs.output))


class HeatmapApiTests(unittest.TestCase):
    def test_keyword_options(self) -> None:
        scene = heatmap(_air_quality(), x="day", y="species", fill="value", target_limit=40, width=1200, screen_width=1440)
        self.assertAlmostEqual(scene.width, 800.0)
        self.assertEqual(scene.domains.fill, (10.0, 40.0, 90.0))

    def test_unknown_keyword_option(self) -> None:
        with self.assertRaises(ValueError):
            heatmap(_air_quality(), x="day", y="species", fill="value", colour="red")

    def test_options_object_is_accepted(self) -> None:
        scene = build_heatmap(_air_quality(), HeatmapOptions(fill_palette="rdbu"), x="day", y="species", fill="value")
        self.assertEqual(len(scene.tiles), 3)


if __name__ == "__main__":
    unittest.main()
