"""Tests for the booking writer and /api/bookings."""

import pytest

from venuebook.errors import ValidationFailed
from venuebook.models import BookingCreate, Owner
from venuebook.services import bookings
from tests.mocks.models import (
    ADMIN,
    OTHER_ADMIN,
    TOMORROW,
    make_booking_payload,
    make_pool_payload,
    make_tennis_payload,
)


@pytest.fixture()
def pool(client) -> dict:
    return client.post("/api/pools", json=make_pool_payload()).json()


@pytest.fixture()
def tennis_court(other_client) -> dict:
    return other_client.post("/api/tennis", json=make_tennis_payload()).json()


class TestCreateBooking:
    def test_public_booking(self, unauthed_client, pool):
        resp = unauthed_client.post(
            "/api/bookings",
            json=make_booking_payload("pool_id", pool["id"], duration=2, guests=3, notes="Lane 2"),
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "Confirmed"
        assert data["venue_kind"] == "pool"
        assert data["venue_id"] == pool["id"]
        assert data["venue_name"] == pool["name"]
        assert data["total_price"] == pool["price"] * 2
        assert data["end_time"] == "12:00 PM"
        assert data["created_by"] == "customer"
        assert data["admin_id"] is None
        assert data["guests"] == 3

    def test_emails_customer_and_owner(self, unauthed_client, mailer, pool):
        unauthed_client.post(
            "/api/bookings",
            json=make_booking_payload("pool_id", pool["id"], customer_email="Jane@Example.com"),
        )
        assert len(mailer.to("jane@example.com")) == 1
        assert len(mailer.to(ADMIN.email)) == 1
        assert pool["name"] in mailer.to(ADMIN.email)[0].subject

    def test_owner_email_escapes_customer_text(self, unauthed_client, mailer, pool):
        unauthed_client.post(
            "/api/bookings",
            json=make_booking_payload(
                "pool_id",
                pool["id"],
                customer_name="<script>alert(1)</script>",
                notes='<img src="x">',
            ),
        )
        html = mailer.to(ADMIN.email)[0].html
        assert "<script>" not in html
        assert "<img" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "&lt;img src=&quot;x&quot;&gt;" in html

    def test_email_failure_does_not_fail_booking(self, client, unauthed_client, mailer, pool):
        mailer.fail = True
        resp = unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"]))
        assert resp.status_code == 201
        assert len(client.get("/api/bookings").json()) == 1

    def test_missing_phone(self, client, unauthed_client, pool):
        payload = make_booking_payload("pool_id", pool["id"], customer_phone=None)
        resp = unauthed_client.post("/api/bookings", json=payload)
        assert resp.status_code == 400
        data = resp.json()
        assert "customer_phone" in data["error"]
        assert data["fields"] == ["customer_phone"]
        assert client.get("/api/bookings").json() == []

    def test_every_missing_field_is_listed(self, unauthed_client):
        resp = unauthed_client.post("/api/bookings", json={"customer_name": "  "})
        assert resp.status_code == 400
        fields = resp.json()["fields"]
        assert fields == [
            "pool_id | tennis_court_id | pickleball_court_id",
            "customer_name",
            "customer_email",
            "customer_phone",
            "date",
            "time",
        ]

    def test_one_venue_only(self, unauthed_client, pool, tennis_court):
        payload = make_booking_payload("pool_id", pool["id"], tennis_court_id=tennis_court["id"])
        resp = unauthed_client.post("/api/bookings", json=payload)
        assert resp.status_code == 400

    def test_unknown_venue(self, unauthed_client):
        resp = unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", "missing"))
        assert resp.status_code == 404
        assert resp.json() == {"error": "Pool not found"}

    def test_time_outside_template_is_accepted(self, unauthed_client, pool):
        resp = unauthed_client.post(
            "/api/bookings",
            json=make_booking_payload("pool_id", pool["id"], time="03:17 AM"),
        )
        assert resp.status_code == 201
        assert resp.json()["time"] == "03:17 AM"

    def test_same_slot_can_be_booked_twice(self, unauthed_client, pool):
        payload = make_booking_payload("pool_id", pool["id"], time="09:00 AM")
        assert unauthed_client.post("/api/bookings", json=payload).status_code == 201
        assert unauthed_client.post("/api/bookings", json=payload).status_code == 201

    def test_owner_entry_is_manual(self, client, pool):
        resp = client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"]))
        assert resp.status_code == 201
        assert resp.json()["created_by"] == "admin"
        assert resp.json()["admin_id"] == client.id

    def test_other_admin_books_as_customer(self, other_client, pool):
        resp = other_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"]))
        assert resp.json()["created_by"] == "customer"

    def test_duration_bounds(self, unauthed_client, pool):
        payload = make_booking_payload("pool_id", pool["id"], duration=9)
        assert unauthed_client.post("/api/bookings", json=payload).status_code == 400


class TestBookingWriterService:
    async def test_nothing_persisted_on_missing_field(self, store):
        venue = await store.create_venue(
            "pool",
            name="pool1",
            description="Test pool",
            location="Vilnius",
            price=40,
            capacity=10,
            owner=Owner(name=ADMIN.name, email=ADMIN.email, phone=ADMIN.phone),
            attributes={"size": "25m"},
        )
        payload = BookingCreate(
            pool_id=venue.id,
            customer_name="Jane",
            customer_email="jane@example.com",
            date=TOMORROW,
            time="10:00 AM",
        )

        with pytest.raises(ValidationFailed) as exc_info:
            await bookings.create_booking(payload)

        assert exc_info.value.fields == ["customer_phone"]
        assert await store.list_bookings() == []


class TestListBookings:
    def test_admin_sees_own_venues_only(self, client, other_client, unauthed_client, pool, tennis_court):
        unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"]))
        unauthed_client.post(
            "/api/bookings",
            json=make_booking_payload("tennis_court_id", tennis_court["id"]),
        )

        mine = client.get("/api/bookings").json()
        assert [b["venue_id"] for b in mine] == [pool["id"]]
        theirs = other_client.get("/api/bookings").json()
        assert [b["venue_id"] for b in theirs] == [tennis_court["id"]]

    def test_superadmin_sees_all(self, superadmin_client, unauthed_client, pool, tennis_court):
        unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"]))
        unauthed_client.post(
            "/api/bookings",
            json=make_booking_payload("tennis_court_id", tennis_court["id"]),
        )
        assert len(superadmin_client.get("/api/bookings").json()) == 2

        resp = superadmin_client.get("/api/bookings", params={"owner_email": OTHER_ADMIN.email})
        assert [b["venue_kind"] for b in resp.json()] == ["tennis"]

    def test_admin_cannot_read_another_owner(self, other_client):
        resp = other_client.get("/api/bookings", params={"owner_email": ADMIN.email})
        assert resp.status_code == 401

    def test_requires_session(self, unauthed_client):
        assert unauthed_client.get("/api/bookings").status_code == 401

    def test_filters(self, client, unauthed_client, pool):
        first = unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"])).json()
        unauthed_client.post(
            "/api/bookings",
            json=make_booking_payload("pool_id", pool["id"], customer_email="bob@example.com"),
        )
        client.patch(f"/api/bookings/{first['id']}", json={"status": "Cancelled"})

        assert len(client.get("/api/bookings", params={"pool_id": pool["id"]}).json()) == 2
        cancelled = client.get("/api/bookings", params={"status": "Cancelled"}).json()
        assert [b["id"] for b in cancelled] == [first["id"]]
        bob = client.get("/api/bookings", params={"customer_email": "BOB@example.com"}).json()
        assert [b["customer_email"] for b in bob] == ["bob@example.com"]
        assert client.get("/api/bookings", params={"date": "2000-01-01"}).json() == []

    def test_foreign_venue_filter_is_empty(self, other_client, unauthed_client, pool):
        unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"]))
        assert other_client.get("/api/bookings", params={"pool_id": pool["id"]}).json() == []


class TestBookingStatus:
    def test_owner_cancels(self, client, unauthed_client, pool):
        booking = unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"])).json()

        resp = client.patch(f"/api/bookings/{booking['id']}", json={"status": "Cancelled"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "Cancelled"

        assert client.get(f"/api/bookings/{booking['id']}").json()["status"] == "Cancelled"

    def test_non_owner_rejected(self, other_client, unauthed_client, pool):
        booking = unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"])).json()
        assert other_client.patch(f"/api/bookings/{booking['id']}", json={"status": "Cancelled"}).status_code == 401
        assert other_client.get(f"/api/bookings/{booking['id']}").status_code == 401

    def test_unknown_status(self, client, unauthed_client, pool):
        booking = unauthed_client.post("/api/bookings", json=make_booking_payload("pool_id", pool["id"])).json()
        assert client.patch(f"/api/bookings/{booking['id']}", json={"status": "Pending"}).status_code == 400

    def test_unknown_booking(self, client):
        assert client.patch("/api/bookings/missing", json={"status": "Cancelled"}).status_code == 404
