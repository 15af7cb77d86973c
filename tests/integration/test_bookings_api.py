"""Test service catalog and booking API endpoints."""

from datetime import datetime

from httpx import AsyncClient

from salon_booking.core.clock import get_clock
from salon_booking.main import app
from salon_booking.services.booking_flow import CONFLICT_MESSAGE
from salon_booking.services.slot_validator import REASON_TOO_LATE_TODAY


class SteppingClock:
    """Returns the given instants in turn, then keeps the last one."""

    def __init__(self, *instants: datetime):
        self.instants = list(instants)

    def now(self) -> datetime:
        if len(self.instants) > 1:
            return self.instants.pop(0)
        return self.instants[0]


def booking_payload(service_id: int, time: str = "10:00", day: str = "2025-06-04", **extra):
    return {
        "customer_id": "customer-1",
        "service_id": service_id,
        "date": day,
        "time": time,
        **extra,
    }


class TestServicesAPI:
    async def test_create_and_list_services(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/services/",
            json={"name": "Colour", "duration_minutes": 90, "price": "80.00"},
        )
        assert response.status_code == 201
        service_id = response.json()["id"]

        services = (await client.get("/api/v1/services/")).json()
        assert [s["id"] for s in services] == [service_id]

        single = await client.get(f"/api/v1/services/{service_id}")
        assert single.json()["duration_minutes"] == 90

    async def test_invalid_duration(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/services/",
            json={"name": "Nothing", "duration_minutes": 0, "price": "0"},
        )
        assert response.status_code == 422

    async def test_unknown_service(self, client: AsyncClient):
        assert (await client.get("/api/v1/services/999")).status_code == 404


class TestAvailabilityAPI:
    async def test_picker_for_empty_day(self, client: AsyncClient, sample_service):
        response = await client.get(
            "/api/v1/bookings/availability",
            params={"date": "2025-06-04", "service_id": sample_service.id},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["bookability"] == {"bookable": True, "reason": "available"}
        assert data["mode"] == "picker"
        assert data["time_options"][0]["time"] == "08:30"

    async def test_slots_once_booked(self, client: AsyncClient, sample_service):
        await client.post("/api/v1/bookings/", json=booking_payload(sample_service.id))

        data = (
            await client.get(
                "/api/v1/bookings/availability",
                params={"date": "2025-06-04", "service_id": sample_service.id},
            )
        ).json()

        assert data["mode"] == "slots"
        slots = {s["time"]: s["is_available"] for s in data["time_slots"]}
        assert slots["09:30"] is False
        assert slots["13:30"] is True

    async def test_closed_day(self, client: AsyncClient, sample_service):
        data = (
            await client.get(
                "/api/v1/bookings/availability",
                params={"date": "2025-06-03", "service_id": sample_service.id},
            )
        ).json()

        assert data["bookability"]["bookable"] is False
        assert data["bookability"]["reason"] == "closed"

    async def test_unknown_service(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/bookings/availability",
            params={"date": "2025-06-04", "service_id": 999},
        )
        assert response.status_code == 404


class TestValidateAPI:
    async def test_valid_slot(self, client: AsyncClient, sample_service):
        response = await client.post(
            "/api/v1/bookings/validate",
            json={"date": "2025-06-04", "time": "19:30", "service_id": sample_service.id},
        )
        assert response.json() == {"valid": True, "reason": None}

    async def test_slot_past_closing(self, client: AsyncClient, sample_service):
        response = await client.post(
            "/api/v1/bookings/validate",
            json={"date": "2025-06-04", "time": "20:15", "service_id": sample_service.id},
        )
        assert response.json() == {
            "valid": False,
            "reason": "service duration exceeds closing time",
        }

    async def test_malformed_time(self, client: AsyncClient, sample_service):
        response = await client.post(
            "/api/v1/bookings/validate",
            json={"date": "2025-06-04", "time": "7:30pm", "service_id": sample_service.id},
        )
        assert response.status_code == 422


class TestCreateBookingAPI:
    async def test_create_booking(self, client: AsyncClient, sample_service):
        response = await client.post(
            "/api/v1/bookings/",
            json=booking_payload(sample_service.id, customer_name="Dana"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["service_duration"] == 60
        assert data["service_name"] == "Haircut"
        assert data["customer_name"] == "Dana"

        listing = (
            await client.get("/api/v1/bookings/", params={"date": "2025-06-04"})
        ).json()
        assert listing["total_count"] == 1

        fetched = await client.get(f"/api/v1/bookings/{data['id']}")
        assert fetched.json()["uuid"] == data["uuid"]

    async def test_conflicting_booking(self, client: AsyncClient, sample_service):
        first = await client.post("/api/v1/bookings/", json=booking_payload(sample_service.id))
        assert first.status_code == 201

        second = await client.post(
            "/api/v1/bookings/",
            json=booking_payload(sample_service.id, time="11:15"),
        )

        assert second.status_code == 409
        assert second.json()["detail"] == CONFLICT_MESSAGE

    async def test_too_late_at_submit_is_not_a_conflict(
        self, client: AsyncClient, sample_service
    ):
        # Date and time are picked at 19:00, the write is attempted at 20:50
        app.dependency_overrides[get_clock] = lambda: SteppingClock(
            datetime(2025, 6, 2, 19, 0),
            datetime(2025, 6, 2, 19, 0),
            datetime(2025, 6, 2, 20, 50),
        )

        response = await client.post(
            "/api/v1/bookings/",
            json=booking_payload(sample_service.id, time="19:45", day="2025-06-02"),
        )

        assert response.status_code == 422
        assert response.json()["detail"] == REASON_TOO_LATE_TODAY

    async def test_booking_after_buffer_ends(self, client: AsyncClient, sample_service):
        await client.post("/api/v1/bookings/", json=booking_payload(sample_service.id))

        response = await client.post(
            "/api/v1/bookings/",
            json=booking_payload(sample_service.id, time="11:20"),
        )
        assert response.status_code == 201

    async def test_closed_day(self, client: AsyncClient, sample_service):
        response = await client.post(
            "/api/v1/bookings/",
            json=booking_payload(sample_service.id, day="2025-06-03"),
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "closed"

    async def test_past_date(self, client: AsyncClient, sample_service):
        response = await client.post(
            "/api/v1/bookings/",
            json=booking_payload(sample_service.id, day="2025-05-30"),
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "past date"

    async def test_unknown_service(self, client: AsyncClient):
        response = await client.post("/api/v1/bookings/", json=booking_payload(999))
        assert response.status_code == 404

    async def test_malformed_time(self, client: AsyncClient, sample_service):
        response = await client.post(
            "/api/v1/bookings/", json=booking_payload(sample_service.id, time="25:00")
        )
        assert response.status_code == 422


class TestBookingStatusAPI:
    async def test_cancel_frees_slot(self, client: AsyncClient, sample_service):
        booking = (
            await client.post("/api/v1/bookings/", json=booking_payload(sample_service.id))
        ).json()
        taken = await client.post(
            "/api/v1/bookings/", json=booking_payload(sample_service.id)
        )
        assert taken.status_code == 409

        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}/status", json={"status": "cancelled"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        rebooked = await client.post(
            "/api/v1/bookings/", json=booking_payload(sample_service.id)
        )
        assert rebooked.status_code == 201

    async def test_accept_with_admin_notes(self, client: AsyncClient, sample_service):
        booking = (
            await client.post("/api/v1/bookings/", json=booking_payload(sample_service.id))
        ).json()

        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}/status",
            json={"status": "accepted", "admin_notes": "Confirmed by phone"},
        )

        assert response.status_code == 200
        assert response.json()["admin_notes"] == "Confirmed by phone"

    async def test_invalid_transition(self, client: AsyncClient, sample_service):
        booking = (
            await client.post("/api/v1/bookings/", json=booking_payload(sample_service.id))
        ).json()
        await client.patch(
            f"/api/v1/bookings/{booking['id']}/status", json={"status": "cancelled"}
        )

        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}/status", json={"status": "accepted"}
        )

        assert response.status_code == 400
        assert "cancelled" in response.json()["detail"]

    async def test_unknown_status(self, client: AsyncClient, sample_service):
        booking = (
            await client.post("/api/v1/bookings/", json=booking_payload(sample_service.id))
        ).json()

        response = await client.patch(
            f"/api/v1/bookings/{booking['id']}/status", json={"status": "maybe"}
        )
        assert response.status_code == 422

    async def test_missing_booking(self, client: AsyncClient):
        response = await client.patch(
            "/api/v1/bookings/999/status", json={"status": "cancelled"}
        )
        assert response.status_code == 404


class TestCustomerBookingsAPI:
    async def test_lists_only_that_customer(self, client: AsyncClient, sample_service):
        await client.post("/api/v1/bookings/", json=booking_payload(sample_service.id))
        await client.post(
            "/api/v1/bookings/",
            json=booking_payload(sample_service.id, time="14:00"),
        )
        other = booking_payload(sample_service.id, time="17:00")
        other["customer_id"] = "customer-2"
        await client.post("/api/v1/bookings/", json=other)

        response = await client.get("/api/v1/bookings/customers/customer-1")

        assert response.status_code == 200
        data = response.json()
        assert data["customer_id"] == "customer-1"
        assert data["total_count"] == 2
        assert {b["time"] for b in data["bookings"]} == {"10:00", "14:00"}

    async def test_customer_without_bookings(self, client: AsyncClient):
        data = (await client.get("/api/v1/bookings/customers/nobody")).json()
        assert data == {"customer_id": "nobody", "bookings": [], "total_count": 0}
