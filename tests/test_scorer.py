"""
StressScorer tests, including the end-to-end landmark scenario.
"""

import itertools
import unittest

from stress_monitor.scoring.features import FeatureExtractor
from stress_monitor.scoring.normalizer import NormalizedFeatures, ScoreNormalizer
from stress_monitor.scoring.scorer import ScorerConfig, StressLabel, StressReading, StressScorer

from tests.fixtures.synthetic_landmarks import make_landmark_set


class TestStressScore(unittest.TestCase):

    def setUp(self):
        self.scorer = StressScorer()

    def test_weights(self):
        self.assertAlmostEqual(self.scorer.compute_score(NormalizedFeatures(1.0, 0.0, 0.0)), 0.3)
        self.assertAlmostEqual(self.scorer.compute_score(NormalizedFeatures(0.0, 1.0, 0.0)), 0.3)
        self.assertAlmostEqual(self.scorer.compute_score(NormalizedFeatures(0.0, 0.0, 1.0)), 0.4)

    def test_extremes(self):
        self.assertEqual(self.scorer.compute_score(NormalizedFeatures(0.0, 0.0, 0.0)), 0.0)
        self.assertAlmostEqual(self.scorer.compute_score(NormalizedFeatures(1.0, 1.0, 1.0)), 1.0)

    def test_score_in_unit_range(self):
        grid = [0.0, 0.1, 0.25, 0.5, 0.75, 0.9, 1.0]
        for eye, mouth, brow in itertools.product(grid, repeat=3):
            score = self.scorer.compute_score(NormalizedFeatures(eye, mouth, brow))
            self.assertTrue(0.0 <= score <= 1.0, msg=f"{score} for {(eye, mouth, brow)}")

    def test_reading_label_matches_score(self):
        reading = self.scorer.score(NormalizedFeatures(1.0, 1.0, 1.0))
        self.assertIs(reading.label, StressLabel.HIGH)
        self.assertEqual(reading.label, self.scorer.label_for(reading.score))

    def test_reading_keeps_timestamp(self):
        reading = self.scorer.score(NormalizedFeatures(0.0, 0.0, 0.0), timestamp=123.0)
        self.assertEqual(reading.timestamp, 123.0)

    def test_zero_timestamp_is_kept(self):
        reading = self.scorer.score(NormalizedFeatures(0.0, 0.0, 0.0), timestamp=0.0)
        self.assertEqual(reading.timestamp, 0.0)


class TestLabelBoundaries(unittest.TestCase):

    def setUp(self):
        self.scorer = StressScorer()

    def test_boundaries(self):
        cases = [
            (0.0, StressLabel.LOW),
            (0.2999, StressLabel.LOW),
            (0.3, StressLabel.MODERATE),
            (0.5999, StressLabel.MODERATE),
            (0.6, StressLabel.HIGH),
            (1.0, StressLabel.HIGH),
        ]
        for score, expected in cases:
            with self.subTest(score=score):
                self.assertIs(self.scorer.label_for(score), expected)

    def test_display_strings(self):
        self.assertEqual(str(StressLabel.LOW), "Low Stress")
        self.assertEqual(StressLabel.MODERATE.value, "Moderate Stress")
        self.assertEqual(StressLabel.HIGH.value, "High Stress")


class TestScorerConfig(unittest.TestCase):

    def test_weights_must_sum_to_one(self):
        with self.assertRaises(ValueError):
            ScorerConfig(eye_weight=0.5, mouth_weight=0.5, brow_weight=0.5)

    def test_thresholds_must_be_ordered(self):
        with self.assertRaises(ValueError):
            ScorerConfig(moderate_threshold=0.7, high_threshold=0.6)


class TestStressReading(unittest.TestCase):

    def test_to_dict(self):
        reading = StressReading(score=0.5, label=StressLabel.MODERATE, timestamp=1.0)
        self.assertEqual(reading.to_dict(), {"score": 0.5, "label": "Moderate Stress", "timestamp": 1.0})

    def test_frozen(self):
        reading = StressReading(score=0.5, label=StressLabel.MODERATE)
        with self.assertRaises(AttributeError):
            reading.score = 0.9


class TestEndToEnd(unittest.TestCase):

    def test_reference_face(self):
        """Eye height 15, mouth gap 10, brow diff 5 -> 0.5 each -> score 0.5, Moderate."""
        landmarks = make_landmark_set(eye_height=15, mouth_gap=10, brow_diff=5)

        raw = FeatureExtractor().extract(landmarks)
        normalized = ScoreNormalizer().normalize(raw)
        self.assertAlmostEqual(normalized.eye_openness, 0.5, places=5)
        self.assertAlmostEqual(normalized.mouth_tension, 0.5, places=5)
        self.assertAlmostEqual(normalized.brow_furrow, 0.5, places=5)

        reading = StressScorer().score(normalized)
        self.assertAlmostEqual(reading.score, 0.5, places=5)
        self.assertIs(reading.label, StressLabel.MODERATE)
        self.assertEqual(str(reading.label), "Moderate Stress")


if __name__ == "__main__":
    unittest.main()
