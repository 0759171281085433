"""
Tests for the Redis availability cache: store, invalidation and the
cached lookup around the engine. Redis is a MagicMock.
"""

import json
import unittest
from unittest.mock import MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError, WatchError

from heyu_booking.database import create_db_engine, create_session_factory, create_tables
from heyu_booking.models.tables import BlockedDates, Bookings
from heyu_booking.services.slots import (
    AvailabilityRedisStore,
    BookingConfig,
    calculate_service_availability,
    invalidate_availability_cache,
)
from heyu_booking.services.slots.redis_store import EMPTY_SENTINEL

WEDNESDAY = "2024-01-03"


class TestAvailabilityRedisStore(unittest.TestCase):

    def setUp(self):
        self.redis = MagicMock()
        self.pipe = self.redis.pipeline.return_value
        self.store = AvailabilityRedisStore(self.redis, ttl_seconds=60)

    def test_store_slots(self):
        self.store.store_slots(WEDNESDAY, 3, ["09:00", "15:00"])

        key = "slots:avail:2024-01-03:3h"
        self.pipe.delete.assert_called_once_with(key)
        self.pipe.zadd.assert_called_once_with(key, {"09:00": 540, "15:00": 900})
        self.pipe.expire.assert_called_once_with(key, 60)
        self.pipe.execute.assert_called_once()

    def test_store_empty_day_uses_sentinel(self):
        self.store.store_slots(WEDNESDAY, 5, [])
        self.pipe.zadd.assert_called_once_with("slots:avail:2024-01-03:5h", {EMPTY_SENTINEL: -1})

    def test_get_slots_miss(self):
        self.redis.exists.return_value = 0
        self.assertIsNone(self.store.get_slots(WEDNESDAY, 3))

    def test_get_slots_hit(self):
        self.redis.exists.return_value = 1
        self.redis.zrange.return_value = [b"09:00", "12:00"]
        self.assertEqual(self.store.get_slots(WEDNESDAY, 3), ["09:00", "12:00"])

    def test_get_slots_empty_day(self):
        self.redis.exists.return_value = 1
        self.redis.zrange.return_value = [EMPTY_SENTINEL]
        self.assertEqual(self.store.get_slots(WEDNESDAY, 3), [])

    def test_delete_dates(self):
        self.redis.scan_iter.return_value = iter(["slots:avail:2024-01-03:3h"])
        self.redis.delete.return_value = 1

        self.assertEqual(self.store.delete_slots([WEDNESDAY]), 1)
        self.redis.scan_iter.assert_called_once_with(match="slots:avail:2024-01-03:*")
        self.redis.delete.assert_called_once_with("slots:avail:2024-01-03:3h")

    def test_delete_nothing_cached(self):
        self.redis.scan_iter.return_value = iter([])
        self.assertEqual(self.store.delete_slots(), 0)
        self.redis.delete.assert_not_called()

    def test_delete_bumps_date_generation(self):
        self.redis.scan_iter.return_value = iter([])
        self.store.delete_slots([WEDNESDAY])
        self.redis.incr.assert_called_once_with("slots:gen:2024-01-03")

    def test_delete_all_bumps_global_generation(self):
        self.redis.scan_iter.return_value = iter([])
        self.store.delete_slots()
        self.redis.incr.assert_called_once_with("slots:gen")

    def test_store_with_current_generation(self):
        self.pipe.mget.return_value = ["1", "4"]

        self.assertTrue(self.store.store_slots(WEDNESDAY, 3, ["12:00"], generation=("1", "4")))
        self.pipe.watch.assert_called_once_with("slots:gen", "slots:gen:2024-01-03")
        self.pipe.multi.assert_called_once()
        self.pipe.execute.assert_called_once()

    def test_store_skipped_after_invalidation(self):
        self.pipe.mget.return_value = ["1", "5"]

        self.assertFalse(self.store.store_slots(WEDNESDAY, 3, ["12:00"], generation=("1", "4")))
        self.pipe.zadd.assert_not_called()
        self.pipe.execute.assert_not_called()

    def test_store_skipped_when_watch_fails(self):
        self.pipe.mget.return_value = ["1", "4"]
        self.pipe.execute.side_effect = WatchError("changed")

        self.assertFalse(self.store.store_slots(WEDNESDAY, 3, ["12:00"], generation=("1", "4")))
        self.pipe.reset.assert_called_once()


class TestInvalidation(unittest.TestCase):

    def test_without_redis(self):
        self.assertEqual(invalidate_availability_cache(None, [WEDNESDAY]), 0)

    def test_redis_error_is_logged(self):
        redis = MagicMock()
        redis.scan_iter.side_effect = RedisConnectionError("down")

        with self.assertLogs("heyu_booking.services.slots.invalidator", level="ERROR"):
            self.assertEqual(invalidate_availability_cache(redis), 0)


class TestCachedLookup(unittest.TestCase):
    """calculate_service_availability against an in-memory database."""

    def setUp(self):
        self.engine = create_db_engine("sqlite://")
        create_tables(self.engine)
        self.db = create_session_factory(self.engine)()
        self.config = BookingConfig()

        self.db.add(Bookings(
            booking_id="BK1",
            service=json.dumps({"id": 1, "duration": "3小时"}),
            duration_hours=3,
            selected_date=WEDNESDAY,
            selected_time="09:00",
            name="A",
            wechat_name="a",
            email="a@example.com",
            phone="12345678",
            created_at="2024-01-01T00:00:00.000Z",
        ))
        self.db.add(Bookings(
            booking_id="BK2",
            duration_hours=3,
            selected_date=WEDNESDAY,
            selected_time="15:00",
            name="B",
            wechat_name="b",
            email="b@example.com",
            phone="12345678",
            status="cancelled",
            created_at="2024-01-01T00:00:00.000Z",
        ))
        self.db.commit()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_without_redis(self):
        slots = calculate_service_availability(self.db, WEDNESDAY, {"duration": "3小时"}, self.config)
        # Cancelled bookings don't hold a slot
        self.assertEqual(slots, ["12:00", "15:00"])

    def test_blocked_date_from_database(self):
        self.db.add(BlockedDates(date=WEDNESDAY, times='["15:00"]'))
        self.db.commit()

        slots = calculate_service_availability(self.db, WEDNESDAY, {"duration": "3小时"}, self.config)
        self.assertEqual(slots, ["12:00"])

    def test_cache_hit_skips_computation(self):
        redis = MagicMock()
        redis.exists.return_value = 1
        redis.zrange.return_value = ["18:00"]

        slots = calculate_service_availability(
            self.db, WEDNESDAY, {"duration": "3小时"}, self.config, redis=redis
        )
        self.assertEqual(slots, ["18:00"])
        redis.pipeline.assert_not_called()

    def test_cache_miss_stores_result(self):
        redis = MagicMock()
        redis.exists.return_value = 0
        redis.mget.return_value = [None, "2"]
        redis.pipeline.return_value.mget.return_value = [None, "2"]

        slots = calculate_service_availability(
            self.db, WEDNESDAY, {"duration": "3小时"}, self.config, redis=redis, cache_ttl=30
        )
        self.assertEqual(slots, ["12:00", "15:00"])
        pipe = redis.pipeline.return_value
        pipe.zadd.assert_called_once_with("slots:avail:2024-01-03:3h", {"12:00": 720, "15:00": 900})
        pipe.expire.assert_called_once_with("slots:avail:2024-01-03:3h", 30)

    def test_booking_committed_during_lookup_is_not_cached(self):
        redis = MagicMock()
        redis.exists.return_value = 0
        redis.mget.return_value = [None, "2"]
        # A booking commit bumped the date generation after the snapshot
        redis.pipeline.return_value.mget.return_value = [None, "3"]

        slots = calculate_service_availability(
            self.db, WEDNESDAY, {"duration": "3小时"}, self.config, redis=redis
        )
        self.assertEqual(slots, ["12:00", "15:00"])
        redis.pipeline.return_value.zadd.assert_not_called()

    def test_redis_failure_falls_back(self):
        redis = MagicMock()
        redis.exists.side_effect = RedisConnectionError("down")

        with self.assertLogs("heyu_booking.services.slots.lookup", level="ERROR"):
            slots = calculate_service_availability(
                self.db, WEDNESDAY, {"duration": "3小时"}, self.config, redis=redis
            )
        self.assertEqual(slots, ["12:00", "15:00"])
        redis.pipeline.assert_not_called()


if __name__ == "__main__":
    unittest.main()
