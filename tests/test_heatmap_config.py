from __future__ import annotations

import unittest

from luvatrix_heatmap import HeatmapOptions


class HeatmapOptionsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        options = HeatmapOptions()
        self.assertEqual((options.width, options.height), (640, 400))
        self.assertEqual(options.margins.bottom, 40)
        self.assertEqual(tuple(options.fill_range), (0.0, 0.5, 1.0))
        self.assertEqual(options.insets.left, 3)

    def test_per_side_inset_overrides_shorthand(self) -> None:
        insets = HeatmapOptions(inset=5, inset_left=0).insets
        self.assertEqual((insets.top, insets.right, insets.bottom, insets.left), (5, 5, 5, 0))

    def test_width_without_display_is_unchanged(self) -> None:
        self.assertEqual(HeatmapOptions().resolve_width(None), 640)

    def test_wide_display_scales_width_by_columns_ratio(self) -> None:
        self.assertAlmostEqual(HeatmapOptions().resolve_width(1440), 640 * 8 / 12)

    def test_narrow_width_is_raised_to_minimum(self) -> None:
        self.assertEqual(HeatmapOptions(width=300).resolve_width(None), 375)
        self.assertEqual(HeatmapOptions(width=300).resolve_width(800), 375)

    def test_from_mapping_rejects_unknown_keys(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown heatmap option"):
            HeatmapOptions.from_mapping({"colour": "red"})

    def test_from_mapping_applies_overrides(self) -> None:
        options = HeatmapOptions.from_mapping({"target_limit": 40, "x_label": "day"})
        self.assertEqual(options.target_limit, 40)
        self.assertEqual(options.x_label, "day")

    def test_fill_domain_may_omit_middle_stop(self) -> None:
        options = HeatmapOptions.from_mapping({"fill_domain": (0, None, 100)})
        self.assertEqual(tuple(options.fill_domain), (0, None, 100))

    def test_invalid_values_are_rejected(self) -> None:
        for overrides in (
            {"width": 0},
            {"height": -1},
            {"columns_ratio": 1.5},
            {"rect_y_padding": -1},
            {"halo": "not-a-colour"},
            {"fill_domain": (0, 1)},
            {"x_domain": (0, 1, 2)},
            {"fill_domain": (0, 5, None)},
        ):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    HeatmapOptions.from_mapping(overrides)


if __name__ == "__main__":
    unittest.main()
