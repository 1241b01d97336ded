"""
Tests for the per-session productivity and focus quality scores.
"""
import unittest

import support  # noqa: F401

from study_analytics.analytics.scoring import expected_breaks, focus_quality, productivity_score


class TestProductivityScore(unittest.TestCase):

    def test_incomplete_session_scores_zero(self):
        for args in [(1500, 1500, 2, 0), (0, 1500, 0, 0), (3000, 1000, 10, 5000)]:
            self.assertEqual(productivity_score(False, *args), 0)

    def test_exact_duration_without_breaks_is_at_least_90(self):
        self.assertEqual(productivity_score(True, 1500, 1500), 90)
        # Under 25 minutes no break is expected, so the break bonus applies too
        self.assertEqual(productivity_score(True, 1200, 1200), 100)
        for duration in (600, 1500, 3000, 6000):
            self.assertGreaterEqual(productivity_score(True, duration, duration), 90)

    def test_break_policy_bonus(self):
        # expected breaks = 1, 2 >= 1 and 200 < 300
        self.assertEqual(productivity_score(True, 1500, 1500, 2, 200), 100)
        # Too much break time
        self.assertEqual(productivity_score(True, 1500, 1500, 2, 300), 90)

    def test_duration_ratio_bands(self):
        # break_duration of 500 keeps the break bonus out of the picture
        self.assertEqual(productivity_score(True, 1000, 1000, 0, 500), 90)
        self.assertEqual(productivity_score(True, 900, 1000, 0, 500), 90)
        self.assertEqual(productivity_score(True, 850, 1000, 0, 500), 80)
        self.assertEqual(productivity_score(True, 1150, 1000, 0, 500), 80)
        self.assertEqual(productivity_score(True, 750, 1000, 0, 500), 70)
        self.assertEqual(productivity_score(True, 1300, 1000, 0, 500), 70)
        self.assertEqual(productivity_score(True, 500, 1000, 0, 500), 60)

    def test_zero_planned_duration(self):
        self.assertEqual(productivity_score(True, 600, 0, 0, 1000), 70)
        self.assertEqual(productivity_score(True, 0, 0), 60)


class TestFocusQuality(unittest.TestCase):

    def test_expected_breaks_one_per_pomodoro(self):
        self.assertEqual(expected_breaks(0), 0)
        self.assertEqual(expected_breaks(1499), 0)
        self.assertEqual(expected_breaks(1500), 1)
        self.assertEqual(expected_breaks(3600), 2)

    def test_clean_session_is_100(self):
        self.assertEqual(focus_quality(1500, 1, 120), 100)
        self.assertEqual(focus_quality(0), 100)

    def test_sustained_focus_bonus_is_clamped(self):
        self.assertEqual(focus_quality(3600, 2, 0), 100)

    def test_penalties_combine(self):
        self.assertEqual(focus_quality(4500, 5, 2000), 50)
        self.assertEqual(focus_quality(3600, 100, 3600), 50)

    def test_penalty_and_bonus_apply_independently(self):
        # -30 for long breaks, +10 for a long session within the break count
        self.assertEqual(focus_quality(3600, 0, 1000), 80)

    def test_always_within_bounds(self):
        for duration in (0, 60, 1500, 3600, 10000):
            for breaks in (0, 1, 5, 100):
                for break_duration in (0, 100, 3600, 20000):
                    score = focus_quality(duration, breaks, break_duration)
                    self.assertGreaterEqual(score, 0)
                    self.assertLessEqual(score, 100)


if __name__ == '__main__':
    unittest.main()
