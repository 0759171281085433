"""Shared setup for HTTP tests: a fresh app on in-memory SQLite per test."""

import unittest

from fastapi.testclient import TestClient

from heyu_booking.config import Settings
from heyu_booking.main import create_app
from heyu_booking.models.tables import Services

TUESDAY = "2024-01-02"
WEDNESDAY = "2024-01-03"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite://",
        "redis_url": None,
        "smtp_host": None,
        "smtp_user": None,
        "smtp_pass": None,
        "enforce_slot_availability": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class ApiTestCase(unittest.TestCase):
    settings_overrides: dict = {}

    def setUp(self):
        self.settings = make_settings(**self.settings_overrides)
        self.app = create_app(self.settings)
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def db(self):
        session = self.app.state.session_factory()
        self.addCleanup(session.close)
        return session

    def seed_services(self):
        db = self.db()
        db.add_all([
            Services(
                id=1, name_cn="基础美甲", name_en="Basic Manicure", category="BasicNails",
                duration="3小时", duration_en="3 hours", duration_hours=3, price="$60",
            ),
            Services(
                id=2, name_cn="延长甲", name_en="Extension", category="Extension",
                duration="5小时", duration_en="5 hours", duration_hours=5, price="$120",
            ),
        ])
        db.commit()

    def booking_payload(self, **overrides) -> dict:
        payload = {
            "service": {"id": 1, "nameCn": "基础美甲", "nameEn": "Basic Manicure", "duration": "3小时"},
            "selectedDate": WEDNESDAY,
            "selectedTime": "09:00",
            "name": "Lin",
            "wechatName": "lin_w",
            "email": "lin@example.com",
            "phone": "+1 (604) 555-0101",
        }
        payload.update(overrides)
        return payload
