"""
ScoreNormalizer tests.
"""

import itertools
import math
import unittest

from stress_monitor.scoring.features import RawFeatures
from stress_monitor.scoring.normalizer import (
    NormalizedFeatures,
    NormalizerConfig,
    ScoreNormalizer,
    clamp_unit,
)


class TestScoreNormalizer(unittest.TestCase):

    def setUp(self):
        self.normalizer = ScoreNormalizer()

    def test_default_scales(self):
        config = NormalizerConfig()
        self.assertEqual((config.eye_scale, config.mouth_scale, config.brow_scale), (30.0, 20.0, 10.0))

    def test_divides_by_scale(self):
        out = self.normalizer.normalize(RawFeatures(eye_openness=15, mouth_tension=10, brow_furrow=5))
        self.assertEqual(out, NormalizedFeatures(eye_openness=0.5, mouth_tension=0.5, brow_furrow=0.5))

    def test_clamps_to_one(self):
        out = self.normalizer.normalize(RawFeatures(eye_openness=90, mouth_tension=21, brow_furrow=1e9))
        self.assertEqual((out.eye_openness, out.mouth_tension, out.brow_furrow), (1.0, 1.0, 1.0))

    def test_clamps_negative_to_zero(self):
        out = self.normalizer.normalize(RawFeatures(eye_openness=-5, mouth_tension=-0.1, brow_furrow=-1e9))
        self.assertEqual((out.eye_openness, out.mouth_tension, out.brow_furrow), (0.0, 0.0, 0.0))

    def test_non_finite_inputs_stay_in_range(self):
        out = self.normalizer.normalize(
            RawFeatures(eye_openness=math.nan, mouth_tension=math.inf, brow_furrow=-math.inf)
        )
        self.assertEqual((out.eye_openness, out.mouth_tension, out.brow_furrow), (0.0, 1.0, 0.0))

    def test_output_always_in_unit_cube(self):
        values = [-1e6, -30.0, -0.5, 0.0, 0.1, 4.9, 10.0, 19.99, 30.0, 45.0, 1e6]
        for eye, mouth, brow in itertools.product(values, repeat=3):
            out = self.normalizer.normalize(RawFeatures(eye, mouth, brow))
            for value in (out.eye_openness, out.mouth_tension, out.brow_furrow):
                self.assertTrue(0.0 <= value <= 1.0, msg=f"{value} out of range for {(eye, mouth, brow)}")

    def test_custom_scales(self):
        normalizer = ScoreNormalizer(NormalizerConfig(eye_scale=10, mouth_scale=10, brow_scale=10))
        out = normalizer.normalize(RawFeatures(eye_openness=5, mouth_tension=2, brow_furrow=10))
        self.assertEqual((out.eye_openness, out.mouth_tension, out.brow_furrow), (0.5, 0.2, 1.0))


class TestClampUnit(unittest.TestCase):

    def test_passthrough(self):
        self.assertEqual(clamp_unit(0.42), 0.42)

    def test_bounds(self):
        self.assertEqual(clamp_unit(-0.0001), 0.0)
        self.assertEqual(clamp_unit(1.0001), 1.0)
        self.assertEqual(clamp_unit(math.nan), 0.0)


if __name__ == "__main__":
    unittest.main()
