"""HTTP-level tests for the booking endpoints."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.api.bookings import page_count

from conftest import BOOKING_DAY

DAY = BOOKING_DAY.isoformat()


@pytest.fixture
def payload(ground, customer):
    def _payload(start="10:00", end="11:00", **overrides):
        body = {
            "customer_id": customer.id,
            "ground_id": ground.id,
            "ground_slot": 1,
            "booking_date": DAY,
            "start_time": start,
            "end_time": end,
            "duration": 60,
            "booking_type": "practice",
            "special_requirements": ["equipment"],
            "notes": "",
            "amount": 2500,
        }
        body.update(overrides)
        return body

    return _payload


async def post_booking(client, body):
    return await client.post("/bookings", json=body)


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_create_booking(client, payload, ground):
    response = await post_booking(client, payload())

    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "pending"
    assert booking["start_time"] == "10:00:00"
    assert Decimal(booking["amount"]) == Decimal("2500")
    assert booking["ground"]["name"] == ground.name
    assert booking["customer"]["first_name"] == "Jane"
    assert booking["special_requirements"] == ["equipment"]


async def test_create_booking_missing_fields(client, payload):
    body = payload()
    del body["amount"]
    del body["customer_id"]

    response = await post_booking(client, body)

    assert response.status_code == 400
    error = response.json()
    assert error["error"] == "validation_error"
    assert error["missing_fields"] == ["customer_id", "amount"]


async def test_create_booking_in_the_past(client, payload):
    yesterday = (date.today() - timedelta(days=1)).isoformat()

    response = await post_booking(client, payload(booking_date=yesterday))

    assert response.status_code == 400
    assert "past" in response.json()["detail"]


async def test_create_booking_unknown_ground(client, payload):
    response = await post_booking(client, payload(ground_id=9999))

    assert response.status_code == 404
    assert response.json() == {"detail": "Ground not found", "error": "not_found"}


async def test_create_conflicting_booking(client, payload, other_customer):
    first = await post_booking(client, payload("09:30", "10:30", customer_id=other_customer.id))
    assert first.status_code == 201

    response = await post_booking(client, payload("10:00", "11:00"))

    assert response.status_code == 409
    error = response.json()
    assert error["error"] == "conflict"
    assert error["conflict_details"]["existing_booking"]["booked_by"] == "John Smith"
    assert "Select a different date" in error["conflict_details"]["suggestions"]


async def test_check_availability(client, payload, ground):
    params = {
        "ground_id": ground.id,
        "booking_date": DAY,
        "start_time": "10:00",
        "end_time": "11:00",
    }

    response = await client.get("/bookings/check-availability", params=params)
    assert response.status_code == 200
    assert response.json() == {"available": True, "message": "Time slot is available for booking"}

    await post_booking(client, payload("09:30", "10:30"))

    response = await client.get("/bookings/check-availability", params=params)
    body = response.json()
    assert body["available"] is False
    assert len(body["conflicts"]) == 1
    assert body["conflicts"][0]["customer_name"] == "Jane Doe"
    assert body["conflicts"][0]["start_time"] == "09:30:00"

    response = await client.get(
        "/bookings/check-availability", params={**params, "ground_slot": 2}
    )
    assert response.json()["available"] is True


async def test_check_availability_missing_params(client, ground):
    response = await client.get("/bookings/check-availability", params={"ground_id": ground.id})

    assert response.status_code == 400
    assert response.json()["missing_fields"] == ["booking_date", "start_time", "end_time"]


async def test_check_availability_rejects_utc_offset(client, ground):
    params = {
        "ground_id": ground.id,
        "booking_date": DAY,
        "start_time": "10:00+05:30",
        "end_time": "11:00+05:30",
    }

    response = await client.get("/bookings/check-availability", params=params)

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


async def test_list_bookings_paginates_and_filters(client, payload, ground):
    for start, end in [("08:00", "09:00"), ("09:00", "10:00"), ("10:00", "11:00")]:
        assert (await post_booking(client, payload(start, end))).status_code == 201

    response = await client.get("/bookings", params={"page": 1, "limit": 2})
    body = response.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    response = await client.get("/bookings", params={"page": 2, "limit": 2})
    assert len(response.json()["data"]) == 1

    response = await client.get("/bookings", params={"status": "cancelled"})
    assert response.json()["pagination"]["total"] == 0

    response = await client.get(
        "/bookings",
        params={"ground_id": ground.id, "start_date": DAY, "end_date": DAY},
    )
    assert response.json()["pagination"]["total"] == 3


async def test_list_user_bookings(client, payload, customer, other_customer):
    await post_booking(client, payload("08:00", "09:00"))
    await post_booking(client, payload("09:00", "10:00", customer_id=other_customer.id))

    response = await client.get(f"/bookings/user/{customer.id}")

    body = response.json()
    assert body["pagination"]["total"] == 1
    assert body["data"][0]["customer_id"] == customer.id


async def test_get_unknown_booking(client):
    response = await client.get("/bookings/9999")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


async def test_confirm_and_cancel_flow(client, payload, successful_payment):
    booking_id = (await post_booking(client, payload())).json()["id"]

    response = await client.put(
        f"/bookings/{booking_id}/confirm", json={"payment_id": successful_payment.id}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"
    assert response.json()["payment"]["status"] == "success"

    response = await client.put(f"/bookings/{booking_id}/cancel", json={"reason": "rain"})
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["notes"] == "Cancellation reason: rain"

    response = await client.put(f"/bookings/{booking_id}/cancel", json={"reason": "rain"})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_state"


async def test_confirm_with_failed_payment(client, payload, failed_payment):
    booking_id = (await post_booking(client, payload())).json()["id"]

    response = await client.put(
        f"/bookings/{booking_id}/confirm", json={"payment_id": failed_payment.id}
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Payment is not successful", "error": "invalid_state"}


async def test_create_booking_rejects_utc_offset(client, payload):
    response = await post_booking(client, payload("10:00+05:30", "11:00+05:30"))

    assert response.status_code == 422


async def test_update_booking_rejects_utc_offset(client, payload):
    booking_id = (await post_booking(client, payload())).json()["id"]

    response = await client.put(f"/bookings/{booking_id}", json={"start_time": "10:30+05:30"})

    assert response.status_code == 422


async def test_update_booking(client, payload):
    booking_id = (await post_booking(client, payload())).json()["id"]

    response = await client.put(
        f"/bookings/{booking_id}", json={"booking_type": "match", "end_time": "12:00"}
    )

    assert response.status_code == 200
    assert response.json()["booking_type"] == "match"
    assert response.json()["duration"] == 120


async def test_update_cancelled_booking(client, payload):
    booking_id = (await post_booking(client, payload())).json()["id"]
    await client.put(f"/bookings/{booking_id}/cancel", json={"reason": "rain"})

    response = await client.put(f"/bookings/{booking_id}", json={"notes": "late change"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot modify completed or cancelled bookings"


async def test_delete_booking(client, payload):
    booking_id = (await post_booking(client, payload())).json()["id"]

    response = await client.delete(f"/bookings/{booking_id}")
    assert response.status_code == 204

    response = await client.get(f"/bookings/{booking_id}")
    assert response.status_code == 404


def test_page_count():
    assert page_count(0, 10) == 0
    assert page_count(10, 10) == 1
    assert page_count(11, 10) == 2
