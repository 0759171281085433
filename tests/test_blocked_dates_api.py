"""
Tests for /api/blocked-dates

Admin block/unblock flows and their effect on availability.
"""

import unittest

from api_support import ApiTestCase, TUESDAY, WEDNESDAY


class TestBlockedDatesApi(ApiTestCase):

    def slots(self, date_str):
        return self.client.post("/api/time-slots/available", json={
            "date": date_str,
            "service": {"duration": "3小时"},
        }).json()["timeSlots"]

    def test_create_and_list(self):
        response = self.client.post("/api/blocked-dates", json={"date": WEDNESDAY, "times": ["12:00"]})

        self.assertEqual(response.status_code, 200)
        blocked = response.json()["blockedDate"]
        self.assertEqual(blocked, {"date": WEDNESDAY, "times": ["12:00"], "fullDay": False})

        data = self.client.get("/api/blocked-dates").json()
        self.assertEqual(data["count"], 1)
        self.assertEqual(self.slots(WEDNESDAY), ["09:00", "15:00"])

    def test_replace_existing(self):
        self.client.post("/api/blocked-dates", json={"date": WEDNESDAY, "times": ["12:00"]})
        self.client.post("/api/blocked-dates", json={"date": WEDNESDAY, "times": []})

        data = self.client.get("/api/blocked-dates").json()
        self.assertEqual(data["count"], 1)
        self.assertTrue(data["blockedDates"][0]["fullDay"])
        self.assertEqual(self.slots(WEDNESDAY), [])

    def test_validation(self):
        response = self.client.post("/api/blocked-dates", json={"date": "2024/01/03", "times": ["7pm"]})

        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        self.assertIn("Invalid date format, expected YYYY-MM-DD", errors)
        self.assertTrue(any(e.startswith("Invalid time format") for e in errors))

    def test_times_must_be_a_list(self):
        response = self.client.post("/api/blocked-dates", json={"date": WEDNESDAY, "times": "12:00"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("Times must be a list", response.json()["errors"])

    def test_delete(self):
        self.client.post("/api/blocked-dates", json={"date": WEDNESDAY, "times": []})

        self.assertEqual(self.client.delete(f"/api/blocked-dates/{WEDNESDAY}").status_code, 200)
        self.assertEqual(self.client.get("/api/blocked-dates").json()["count"], 0)
        self.assertEqual(self.slots(WEDNESDAY), ["09:00", "12:00", "15:00"])

    def test_delete_missing(self):
        response = self.client.delete(f"/api/blocked-dates/{WEDNESDAY}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Blocked date not found")

    def test_block_single_times(self):
        self.client.post(f"/api/blocked-dates/{WEDNESDAY}/times/09:00")
        response = self.client.post(f"/api/blocked-dates/{WEDNESDAY}/times/15:00")

        self.assertEqual(response.json()["blockedDate"]["times"], ["09:00", "15:00"])
        self.assertEqual(self.slots(WEDNESDAY), ["12:00"])

    def test_blocking_every_slot_collapses_to_full_day(self):
        for t in ("09:00", "12:00", "15:00"):
            response = self.client.post(f"/api/blocked-dates/{WEDNESDAY}/times/{t}")

        blocked = response.json()["blockedDate"]
        self.assertTrue(blocked["fullDay"])
        self.assertEqual(blocked["times"], [])

    def test_tuesday_needs_evening_slot_to_collapse(self):
        for t in ("09:00", "12:00", "15:00"):
            response = self.client.post(f"/api/blocked-dates/{TUESDAY}/times/{t}")

        self.assertFalse(response.json()["blockedDate"]["fullDay"])
        self.assertEqual(self.slots(TUESDAY), ["18:00"])

    def test_block_invalid_time(self):
        response = self.client.post(f"/api/blocked-dates/{WEDNESDAY}/times/noon")
        self.assertEqual(response.status_code, 400)

    def test_unblock_time(self):
        self.client.post("/api/blocked-dates", json={"date": WEDNESDAY, "times": ["09:00", "12:00"]})

        response = self.client.delete(f"/api/blocked-dates/{WEDNESDAY}/times/09:00")
        self.assertEqual(response.json()["blockedDate"]["times"], ["12:00"])

    def test_unblock_last_time_removes_record(self):
        self.client.post("/api/blocked-dates", json={"date": WEDNESDAY, "times": ["12:00"]})

        response = self.client.delete(f"/api/blocked-dates/{WEDNESDAY}/times/12:00")
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["blockedDate"])
        self.assertEqual(self.client.get("/api/blocked-dates").json()["count"], 0)

    def test_unblock_inside_full_day_keeps_other_slots_blocked(self):
        self.client.post("/api/blocked-dates", json={"date": TUESDAY, "times": []})

        response = self.client.delete(f"/api/blocked-dates/{TUESDAY}/times/12:00")
        blocked = response.json()["blockedDate"]
        self.assertFalse(blocked["fullDay"])
        self.assertEqual(blocked["times"], ["09:00", "15:00", "18:00"])
        self.assertEqual(self.slots(TUESDAY), ["12:00"])

    def test_unblock_time_that_is_not_blocked(self):
        self.client.post("/api/blocked-dates", json={"date": WEDNESDAY, "times": ["12:00"]})

        response = self.client.delete(f"/api/blocked-dates/{WEDNESDAY}/times/09:00")
        self.assertEqual(response.json()["blockedDate"]["times"], ["12:00"])

    def test_unblock_missing_date(self):
        response = self.client.delete(f"/api/blocked-dates/{WEDNESDAY}/times/09:00")
        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
