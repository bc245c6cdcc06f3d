"""
Tests for the HTTP layer: routers plus the error mapping in app/main.py.
"""

from datetime import datetime, timezone
from decimal import Decimal

from fastapi.testclient import TestClient

from app.database import get_db
from app.main import app

from .support import DatabaseTestCase, utc


def parse(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00")).astimezone(timezone.utc)


class ApiTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self.haircut = self.add_service("Haircut", duration_min=30)

    def tearDown(self):
        app.dependency_overrides.clear()
        super().tearDown()

    def book(self, starts_at="2024-01-02T13:00:00Z", **payload):
        payload.setdefault("serviceId", self.haircut.id)
        payload.setdefault("clientName", "Carlos")
        payload["startsAt"] = starts_at
        return self.client.post("/appointments", json=payload)


class TestAppointmentsApi(ApiTestCase):
    """Tests for /appointments endpoints and status codes."""

    def test_create_returns_201(self):
        response = self.book()
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "CONFIRMED")
        self.assertEqual(parse(body["endsAt"]), utc(2024, 1, 2, 13, 30))
        self.assertEqual(body["service"]["durationMin"], 30)
        self.assertEqual(body["clientName"], "Carlos")

    def test_conflict_returns_409_with_details(self):
        first = self.book().json()
        response = self.book(starts_at="2024-01-02T13:15:00Z")
        self.assertEqual(response.status_code, 409)
        body = response.json()
        self.assertIn("This time slot is not available", body["detail"])
        self.assertEqual(body["conflict"]["type"], "appointment")
        self.assertEqual(body["conflict"]["id"], first["id"])

    def test_time_block_conflict_returns_409(self):
        created = self.client.post(
            "/time-blocks",
            json={
                "type": "LUNCH",
                "reason": "Lunch",
                "startsAt": "2024-01-02T15:00:00Z",
                "endsAt": "2024-01-02T16:00:00Z",
            },
        )
        self.assertEqual(created.status_code, 201)
        response = self.book(starts_at="2024-01-02T15:15:00Z")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["conflict"]["type"], "time_block")

    def test_missing_client_returns_400(self):
        response = self.book(clientName=None)
        self.assertEqual(response.status_code, 400)
        self.assertIn("Missing client identification", response.json()["detail"])

    def test_inverted_range_returns_400(self):
        response = self.book(endsAt="2024-01-02T12:00:00Z")
        self.assertEqual(response.status_code, 400)

    def test_unknown_service_returns_404(self):
        response = self.book(serviceId="missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Service not found")

    def test_malformed_payload_returns_422(self):
        response = self.client.post("/appointments", json={"serviceId": self.haircut.id})
        self.assertEqual(response.status_code, 422)

    def test_unknown_timezone_returns_422(self):
        response = self.book(timezone="Mars/Olympus")
        self.assertEqual(response.status_code, 422)

    def test_list_is_paginated(self):
        for hour in (13, 14, 15):
            self.book(starts_at=f"2024-01-02T{hour}:00:00Z")
        response = self.client.get("/appointments", params={"limit": 2})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body["data"]), 2)
        self.assertEqual(
            body["meta"],
            {
                "currentPage": 1,
                "itemsPerPage": 2,
                "totalItems": 3,
                "totalPages": 2,
                "hasPreviousPage": False,
                "hasNextPage": True,
            },
        )

    def test_list_offset_and_date_filter(self):
        for hour in (13, 14, 15):
            self.book(starts_at=f"2024-01-02T{hour}:00:00Z")
        self.book(starts_at="2024-01-05T13:00:00Z")
        response = self.client.get("/appointments", params={"date": "2024-01-02", "limit": 2, "offset": 2})
        body = response.json()
        self.assertEqual(body["meta"]["currentPage"], 2)
        self.assertEqual(body["meta"]["totalItems"], 3)
        self.assertEqual(len(body["data"]), 1)

    def test_invalid_limit_returns_400(self):
        response = self.client.get("/appointments", params={"limit": 500})
        self.assertEqual(response.status_code, 400)

    def test_invalid_status_filter_returns_400(self):
        response = self.client.get("/appointments", params={"status": "LOST"})
        self.assertEqual(response.status_code, 400)

    def test_get_one(self):
        created = self.book().json()
        response = self.client.get(f"/appointments/{created['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], created["id"])

    def test_get_unknown_returns_404(self):
        response = self.client.get("/appointments/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Appointment not found")

    def test_patch_reschedules(self):
        created = self.book().json()
        response = self.client.patch(
            f"/appointments/{created['id']}", json={"startsAt": "2024-01-02T13:15:00Z"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(parse(response.json()["endsAt"]), utc(2024, 1, 2, 13, 45))

    def test_patch_into_conflict_returns_409(self):
        created = self.book().json()
        self.book(starts_at="2024-01-02T14:00:00Z")
        response = self.client.patch(
            f"/appointments/{created['id']}", json={"startsAt": "2024-01-02T14:00:00Z"}
        )
        self.assertEqual(response.status_code, 409)

    def test_delete_returns_204(self):
        created = self.book().json()
        response = self.client.delete(f"/appointments/{created['id']}")
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get(f"/appointments/{created['id']}").status_code, 404)

    def test_available_slots(self):
        response = self.client.get(
            "/appointments/available-slots",
            params={"date": "2024-01-02", "serviceId": self.haircut.id},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertIsInstance(body["slots"], list)
        self.assertEqual(body["businessHours"], {"openTime": "08:00", "closeTime": "18:00"})

    def test_available_slots_on_closed_day_returns_400(self):
        response = self.client.get(
            "/appointments/available-slots",
            params={"date": "2024-01-07", "serviceId": self.haircut.id},
        )
        self.assertEqual(response.status_code, 400)

    def test_available_slots_for_unknown_barber_returns_404(self):
        response = self.client.get(
            "/appointments/available-slots",
            params={"date": "2024-01-02", "serviceId": self.haircut.id, "barberId": "missing"},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Barber not found")

    def test_client_history(self):
        self.book(clientName="Diego Souza")
        response = self.client.get("/appointments/client-history", params={"clientName": "diego"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["meta"]["totalItems"], 1)

    def test_client_history_without_criteria_returns_400(self):
        response = self.client.get("/appointments/client-history")
        self.assertEqual(response.status_code, 400)


class TestTimeBlocksApi(ApiTestCase):
    """Tests for /time-blocks endpoints."""

    def create_block(self, **payload):
        data = {
            "type": "DAY_OFF",
            "reason": "Dentist",
            "startsAt": "2024-01-04T11:00:00Z",
            "endsAt": "2024-01-04T21:00:00Z",
        }
        data.update(payload)
        return self.client.post("/time-blocks", json=data)

    def test_create_and_list(self):
        created = self.create_block()
        self.assertEqual(created.status_code, 201)
        listed = self.client.get("/time-blocks").json()
        self.assertEqual([block["id"] for block in listed], [created.json()["id"]])

    def test_inverted_range_returns_400(self):
        response = self.create_block(endsAt="2024-01-04T10:00:00Z")
        self.assertEqual(response.status_code, 400)

    def test_patch_and_delete(self):
        block_id = self.create_block().json()["id"]
        patched = self.client.patch(f"/time-blocks/{block_id}", json={"reason": "Doctor"})
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["reason"], "Doctor")
        self.assertEqual(self.client.delete(f"/time-blocks/{block_id}").status_code, 204)
        self.assertEqual(self.client.get(f"/time-blocks/{block_id}").status_code, 404)


class TestCommissionsApi(ApiTestCase):
    """Tests for commission fields on appointments and /barbers/{id}/commissions/paid."""

    def setUp(self):
        super().setUp()
        self.barber = self.add_barber("Bruno")

    def test_booking_reports_commission(self):
        body = self.book(barberId=self.barber.id).json()
        self.assertEqual(Decimal(str(body["commission"])), Decimal("25.00"))
        self.assertFalse(body["commissionPaid"])

    def test_mark_paid_and_filter(self):
        self.book(barberId=self.barber.id)
        self.book(starts_at="2024-01-02T14:00:00Z", barberId=self.barber.id)

        response = self.client.post(f"/barbers/{self.barber.id}/commissions/paid")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"updated": 2})

        unpaid = self.client.get("/appointments", params={"commissionPaid": "false"}).json()
        paid = self.client.get("/appointments", params={"commissionPaid": "true"}).json()
        self.assertEqual(unpaid["meta"]["totalItems"], 0)
        self.assertEqual(paid["meta"]["totalItems"], 2)

    def test_mark_paid_for_unknown_barber_returns_404(self):
        response = self.client.post("/barbers/missing/commissions/paid")
        self.assertEqual(response.status_code, 404)

    def test_patch_completed_and_paid(self):
        created = self.book(barberId=self.barber.id).json()
        response = self.client.patch(
            f"/appointments/{created['id']}", json={"status": "COMPLETED", "commissionPaid": True}
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "COMPLETED")
        self.assertTrue(body["commissionPaid"])
        self.assertEqual(Decimal(str(body["commission"])), Decimal("25.00"))


class TestHealth(ApiTestCase):
    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")
