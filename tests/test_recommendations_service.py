"""
Tests for schedule recommendation generation and lifecycle.
"""
import json
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from support import MONDAY, add_session, make_engine, make_user

from sqlmodel import Session

from study_analytics.config import settings
from study_analytics.exceptions import RecommendationNotFoundError
from study_analytics.recommendations import service
from study_analytics.recommendations.models import RecommendationStatus
from study_analytics.utils import ensure_utc, to_local


class RecommendationsTestCase(unittest.TestCase):

    def setUp(self):
        self.engine = make_engine()
        self.db = Session(self.engine)
        self.user = make_user(self.db)
        self.other = make_user(self.db, email='other@example.com')

    def tearDown(self):
        self.db.close()

    def seed_history(self):
        for i in range(10):
            add_session(self.db, self.user.id, hour=9, productivity=80 if i % 2 else 90)
        for _ in range(5):
            add_session(self.db, self.user.id, hour=14, productivity=60)


class TestGenerateRecommendations(RecommendationsTestCase):

    def test_defaults_without_history(self):
        created = service.generate_schedule_recommendations(
            self.db, self.user.id, now=MONDAY + timedelta(hours=6)
        )

        self.assertEqual([r.recommended_time.hour for r in created], [9, 14, 19])
        for recommendation in created:
            self.assertEqual(recommendation.confidence, 50)
            self.assertEqual(recommendation.status, RecommendationStatus.PENDING)
            self.assertEqual(recommendation.session_type, 'Focus Session')
            self.assertEqual(recommendation.duration, 1500)
            self.assertEqual(json.loads(recommendation.based_on_metrics)['type'], 'default')

    def test_defaults_skip_past_hours(self):
        created = service.generate_schedule_recommendations(
            self.db, self.user.id, now=MONDAY + timedelta(hours=15)
        )
        self.assertEqual([r.recommended_time.hour for r in created], [19])

    def test_recommends_best_hours_from_history(self):
        self.seed_history()

        created = service.generate_schedule_recommendations(
            self.db, self.user.id, session_type='Deep Work', now=MONDAY + timedelta(hours=6)
        )

        self.assertEqual([r.recommended_time.hour for r in created], [9, 14])
        best, second = created
        self.assertEqual(best.confidence, 100)
        self.assertEqual(
            best.reason,
            "Based on 10 previous sessions, you average 85% productivity at 9:00. "
            "This is one of your peak performance times!",
        )
        self.assertEqual(second.confidence, 40)
        self.assertTrue(second.reason.endswith("You typically perform well during this hour."))
        self.assertEqual(best.session_type, 'Deep Work')
        self.assertEqual(
            json.loads(best.based_on_metrics),
            {'hourly_productivity': 85, 'sample_size': 10, 'hour': 9},
        )

    def test_past_slots_skipped(self):
        self.seed_history()
        created = service.generate_schedule_recommendations(
            self.db, self.user.id, now=MONDAY + timedelta(hours=10)
        )
        self.assertEqual([r.recommended_time.hour for r in created], [14])

    def test_target_date(self):
        self.seed_history()
        created = service.generate_schedule_recommendations(
            self.db, self.user.id,
            target_date=MONDAY + timedelta(days=1, hours=12),
            now=MONDAY + timedelta(hours=20),
        )
        self.assertEqual(len(created), 2)
        self.assertTrue(all(r.recommended_time.day == 6 for r in created))


class TestRecommendationLifecycle(RecommendationsTestCase):

    def setUp(self):
        super().setUp()
        self.created = service.generate_schedule_recommendations(
            self.db, self.user.id, now=MONDAY + timedelta(hours=6)
        )

    def test_accept_and_reject_feed_stats(self):
        first, second, third = self.created
        accepted = service.accept_recommendation(self.db, self.user.id, first.id)
        self.assertEqual(accepted.status, RecommendationStatus.ACCEPTED)
        service.reject_recommendation(self.db, self.user.id, second.id)
        service.reject_recommendation(self.db, self.user.id, third.id)

        stats = service.recommendation_stats(self.db, self.user.id)
        self.assertEqual(stats.total, 3)
        self.assertEqual(stats.accepted, 1)
        self.assertEqual(stats.rejected, 2)
        self.assertEqual(stats.pending, 0)
        self.assertEqual(stats.acceptance_rate, 33)

    def test_stats_with_nothing_decided(self):
        stats = service.recommendation_stats(self.db, self.user.id)
        self.assertEqual(stats.pending, 3)
        self.assertEqual(stats.acceptance_rate, 0)

    def test_other_users_recommendation_not_found(self):
        with self.assertRaises(RecommendationNotFoundError):
            service.accept_recommendation(self.db, self.other.id, self.created[0].id)
        with self.assertRaises(RecommendationNotFoundError):
            service.reject_recommendation(self.db, self.user.id, 9999)

    def test_expire_and_pending(self):
        later = MONDAY + timedelta(hours=15)
        self.assertEqual(len(service.pending_recommendations(self.db, self.user.id, now=later)), 1)

        self.assertEqual(service.expire_old_recommendations(self.db, self.user.id, now=later), 2)
        stats = service.recommendation_stats(self.db, self.user.id)
        self.assertEqual(stats.expired, 2)
        self.assertEqual(stats.pending, 1)

        # Decided recommendations are no longer pending
        remaining = service.pending_recommendations(self.db, self.user.id, now=later)
        service.accept_recommendation(self.db, self.user.id, remaining[0].id)
        self.assertEqual(service.pending_recommendations(self.db, self.user.id, now=later), [])

    def test_history_is_scoped_to_user(self):
        self.assertEqual(len(service.recommendation_history(self.db, self.user.id)), 3)
        self.assertEqual(service.recommendation_history(self.db, self.other.id), [])
        self.assertEqual(len(service.recommendation_history(self.db, self.user.id, limit=2)), 2)


class TestRecommendationsLocalTimezone(RecommendationsTestCase):

    def setUp(self):
        super().setUp()
        patcher = patch.object(settings, 'timezone', 'America/New_York')
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_slots_are_local_hours_stored_in_utc(self):
        # Sunday 19:00 in New York
        for i in range(10):
            add_session(
                self.db, self.user.id, set_hour=False, productivity=90,
                start_time=MONDAY + timedelta(minutes=i),
            )

        created = service.generate_schedule_recommendations(
            self.db, self.user.id,
            target_date=MONDAY + timedelta(days=1),
            now=MONDAY,
        )

        self.assertEqual(len(created), 1)
        # Monday 19:00 in New York (EST) is Tuesday 00:00 UTC
        self.assertEqual(
            ensure_utc(created[0].recommended_time),
            datetime(2026, 1, 6, 0, tzinfo=timezone.utc),
        )
        self.assertEqual(to_local(created[0].recommended_time).hour, 19)

    def test_default_slots_use_local_day(self):
        created = service.generate_schedule_recommendations(self.db, self.user.id, now=MONDAY)

        # Today in New York is Sunday 4 January; 09:00 and 14:00 have passed
        self.assertEqual(len(created), 1)
        self.assertEqual(
            ensure_utc(created[0].recommended_time),
            datetime(2026, 1, 5, 0, tzinfo=timezone.utc),
        )


if __name__ == '__main__':
    unittest.main()
