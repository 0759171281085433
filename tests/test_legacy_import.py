"""
Tests for services/legacy_import.py
"""

import json
import tempfile
import unittest
from pathlib import Path

from heyu_booking.database import create_db_engine, create_session_factory, create_tables
from heyu_booking.models.tables import BlockedDates, Bookings, Services
from heyu_booking.services.legacy_import import import_legacy_dir
from heyu_booking.services.slots import calculate_service_availability
from heyu_booking.services.slots.lookup import load_day_bookings


class TestLegacyImport(unittest.TestCase):

    def setUp(self):
        self.engine = create_db_engine("sqlite://")
        create_tables(self.engine)
        self.db = create_session_factory(self.engine)()

        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.data_dir = Path(tmp.name)

        self.write("services.json", {"services": [
            {"id": 1, "nameCn": "基础美甲", "nameEn": "Basic Manicure", "category": "BasicNails",
             "duration": "3小时", "durationEn": "3 hours", "price": "$60"},
            {"id": 2, "nameCn": "延长甲", "nameEn": "Extension", "duration": "5小时", "isAddOn": False},
        ]})
        self.write("bookings.json", {"bookings": [
            {"bookingId": "BK1", "service": {"id": 2, "duration": "5小时"},
             "selectedDate": "2024-01-03T00:00:00.000Z", "selectedTime": "9:00",
             "name": "Lin", "wechatName": "lin_w", "email": "lin@example.com", "phone": "12345678",
             "createdAt": "2024-01-01T00:00:00.000Z"},
            {"bookingId": "BK2", "date": "2024-01-04", "time": "12:00", "duration": "3小时",
             "name": "Wu", "wechatName": "wu", "email": "wu@example.com", "phone": "87654321"},
            {"bookingId": "BK3", "name": "No date"},
        ]})
        self.write("blockedDates.json", {"blockedDates": [
            {"date": "2024-01-05", "times": []},
            {"date": "2024-01-06", "times": ["9:00", "15:00"]},
        ]})

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def write(self, name, data):
        (self.data_dir / name).write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def test_import(self):
        result = import_legacy_dir(self.db, self.data_dir)

        self.assertEqual(result, {"services": 2, "bookings": 2, "blocked_dates": 2})
        self.assertEqual(self.db.get(Services, 2).duration_hours, 5)

        booking = self.db.query(Bookings).filter(Bookings.booking_id == "BK1").one()
        self.assertEqual(booking.selected_date, "2024-01-03")
        self.assertEqual(booking.selected_time, "09:00")
        self.assertEqual(booking.duration_hours, 5)

        legacy = self.db.query(Bookings).filter(Bookings.booking_id == "BK2").one()
        self.assertEqual(legacy.selected_time, "12:00")
        self.assertEqual(legacy.duration_hours, 3)

        self.assertEqual(self.db.get(BlockedDates, "2024-01-05").times, "[]")
        self.assertEqual(json.loads(self.db.get(BlockedDates, "2024-01-06").times), ["09:00", "15:00"])

    def test_import_twice_updates_in_place(self):
        import_legacy_dir(self.db, self.data_dir)
        import_legacy_dir(self.db, self.data_dir)

        self.assertEqual(self.db.query(Services).count(), 2)
        self.assertEqual(self.db.query(Bookings).count(), 2)
        self.assertEqual(self.db.query(BlockedDates).count(), 2)

    def test_imported_bookings_hold_their_slots(self):
        import_legacy_dir(self.db, self.data_dir)

        self.assertEqual(len(load_day_bookings(self.db, "2024-01-03")), 1)
        # 09:00-14:00 booking: right after it, or the 15:00 grid slot
        slots = calculate_service_availability(self.db, "2024-01-03", {"duration": "3小时"})
        self.assertEqual(slots, ["14:00", "15:00"])

    def test_missing_files_are_skipped(self):
        empty = tempfile.TemporaryDirectory()
        self.addCleanup(empty.cleanup)

        result = import_legacy_dir(self.db, Path(empty.name))
        self.assertEqual(result, {"services": 0, "bookings": 0, "blocked_dates": 0})


if __name__ == "__main__":
    unittest.main()
