# -*- coding: utf-8 -*-
"""
Tests for Config defaults, validation and dict round-tripping.
"""

import json
import unittest

from section_trace.config import DEFAULT_TRACE_CATEGORIES, SUPPORTED_VIEW_TYPES, Config


class TestConfig(unittest.TestCase):
    """Config holds every tolerance and switch used by a trace pass."""

    def test_defaults(self):
        """Defaults match the documented tolerances."""
        cfg = Config()
        self.assertEqual(cfg.curve_tolerance_ft, 0.1)
        self.assertEqual(cfg.min_curve_length_ft, 0.001)
        self.assertEqual(cfg.max_curve_length_ft, 10000.0)
        self.assertEqual(cfg.band_clip_tolerance_ft, 0.5)
        self.assertEqual(cfg.max_traversal_depth, 32)
        self.assertEqual(cfg.trace_categories, DEFAULT_TRACE_CATEGORIES)
        self.assertEqual(cfg.supported_view_types, SUPPORTED_VIEW_TYPES)
        self.assertTrue(cfg.copy_annotations)
        self.assertIsNone(cfg.material_table_path)

    def test_layer_min_width_is_converted_to_feet(self):
        cfg = Config(layer_min_width_in=0.5)
        self.assertAlmostEqual(cfg.layer_min_width_ft, 0.5 / 12.0)

    def test_invalid_values_raise(self):
        """Test that nonsensical tolerances are rejected."""
        bad = [
            {"min_curve_length_ft": 0},
            {"max_curve_length_ft": 0.0005},
            {"curve_tolerance_ft": -1},
            {"band_clip_tolerance_ft": -0.1},
            {"max_traversal_depth": 0},
            {"basis_tolerance": 0},
            {"max_diag_events": -1},
        ]
        for kw in bad:
            with self.assertRaises(ValueError, msg=str(kw)):
                Config(**kw)

    def test_to_dict_is_json_safe(self):
        cfg_dict = Config().to_dict()
        json.dumps(cfg_dict)
        self.assertIsInstance(cfg_dict["trace_categories"], list)

    def test_round_trip(self):
        """Test that config can round-trip through to_dict/from_dict."""
        cfg1 = Config(curve_tolerance_ft=0.25, copy_annotations=False, trace_categories=("OST_Walls",))
        cfg2 = Config.from_dict(cfg1.to_dict())
        self.assertEqual(cfg1.to_dict(), cfg2.to_dict())
        self.assertEqual(cfg2.trace_categories, ("OST_Walls",))

    def test_from_partial_dict_uses_defaults(self):
        cfg = Config.from_dict({"verbose": True})
        self.assertTrue(cfg.verbose)
        self.assertEqual(cfg.max_traversal_depth, 32)

    def test_repr_mentions_key_settings(self):
        self.assertIn("curve_tolerance_ft=0.1", repr(Config()))


if __name__ == "__main__":
    unittest.main()
