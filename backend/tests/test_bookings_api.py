import pytest
from fastapi import status

from app.db.models import Booking
from app.services.payments import payment_signature
from conftest import auth_headers


@pytest.fixture
def package_id(make_package):
    return make_package("Kerala Backwaters", price=15000, location="Kerala")


def _booking_body(package_id, **overrides):
    body = {
        "packageId": package_id,
        "startDate": "2030-02-01T00:00:00",
        "numberOfPeople": 2,
        "totalAmount": 30000,
        "contactInfo": {"name": "Asha Verma", "email": "asha@example.com", "phone": "+91 9876543210"},
        "specialRequests": "Window seats",
    }
    body.update(overrides)
    return body


# TEST: POST /api/bookings
def test_create_booking_starts_pending(test_client, customer, package_id, db_session):
    response = test_client.post("/api/bookings", json=_booking_body(package_id), headers=customer["headers"])

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["status"] == "pending"
    assert body["message"] == "Booking created successfully"

    booking = db_session.get(Booking, body["bookingId"])
    assert booking.user_id == customer["id"]
    assert booking.payment_status == "pending"
    assert booking.contact_email == "asha@example.com"


def test_create_booking_requires_identity(test_client, package_id):
    response = test_client.post("/api/bookings", json=_booking_body(package_id))

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_booking_rejects_bad_token(test_client, package_id):
    headers = {"Authorization": "Bearer not-a-token"}
    response = test_client.post("/api/bookings", json=_booking_body(package_id), headers=headers)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_booking_unknown_local_user(test_client, package_id):
    """A valid token whose account was never synced has no profile"""
    response = test_client.post("/api/bookings", json=_booking_body(package_id), headers=auth_headers("ghost"))

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_admins_cannot_use_customer_bookings(test_client, admin, package_id):
    response = test_client.post("/api/bookings", json=_booking_body(package_id), headers=admin["headers"])

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_create_booking_unknown_package(test_client, customer):
    response = test_client.post("/api/bookings", json=_booking_body(9999), headers=customer["headers"])

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.parametrize("overrides", [
    {"numberOfPeople": 0},
    {"totalAmount": -1},
    {"contactInfo": {"name": "Asha", "email": "not-an-email", "phone": "1"}},
    {"startDate": "someday"},
])
def test_create_booking_validates_body(test_client, customer, package_id, overrides):
    response = test_client.post(
        "/api/bookings", json=_booking_body(package_id, **overrides), headers=customer["headers"]
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# TEST: GET /api/bookings
def test_list_my_bookings_only_returns_mine(test_client, customer, other_customer, package_id, make_booking):
    mine = make_booking(customer["id"], package_id)
    make_booking(other_customer["id"], package_id)

    response = test_client.get("/api/bookings", headers=customer["headers"])

    assert response.status_code == status.HTTP_200_OK
    bookings = response.json()
    assert [b["id"] for b in bookings] == [mine]
    assert bookings[0]["package"]["title"] == "Kerala Backwaters"
    assert bookings[0]["contactInfo"]["name"] == "Asha Verma"


# TEST: GET /api/bookings/{id}
def test_get_booking_checks_ownership(test_client, customer, other_customer, package_id, make_booking):
    booking_id = make_booking(customer["id"], package_id)

    assert test_client.get(f"/api/bookings/{booking_id}", headers=customer["headers"]).status_code == 200
    response = test_client.get(f"/api/bookings/{booking_id}", headers=other_customer["headers"])
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert test_client.get("/api/bookings/424242", headers=customer["headers"]).status_code == 404


def test_get_booking_includes_full_package(test_client, customer, package_id, make_booking):
    booking_id = make_booking(customer["id"], package_id)

    booking = test_client.get(f"/api/bookings/{booking_id}", headers=customer["headers"]).json()

    assert booking["package"]["location"] == "Kerala"
    assert "itinerary" in booking["package"]


# TEST: PATCH /api/bookings/{id}
def test_customer_can_cancel(test_client, customer, package_id, make_booking):
    booking_id = make_booking(customer["id"], package_id, status="confirmed")

    response = test_client.patch(
        f"/api/bookings/{booking_id}", json={"status": "cancelled"}, headers=customer["headers"]
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "cancelled"


@pytest.mark.parametrize("new_status", ["confirmed", "completed", "bogus", None])
def test_customer_cannot_set_other_statuses(test_client, customer, package_id, make_booking, new_status):
    booking_id = make_booking(customer["id"], package_id)

    response = test_client.patch(
        f"/api/bookings/{booking_id}", json={"status": new_status}, headers=customer["headers"]
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_completed_booking_cannot_be_cancelled(test_client, customer, package_id, make_booking):
    booking_id = make_booking(customer["id"], package_id, status="completed")

    response = test_client.patch(
        f"/api/bookings/{booking_id}", json={"status": "cancelled"}, headers=customer["headers"]
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_other_customer_cannot_cancel(test_client, customer, other_customer, package_id, make_booking):
    booking_id = make_booking(customer["id"], package_id)

    response = test_client.patch(
        f"/api/bookings/{booking_id}", json={"status": "cancelled"}, headers=other_customer["headers"]
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


# TEST: GET /api/payments
def test_payment_history(test_client, customer, package_id, make_booking):
    paid = make_booking(customer["id"], package_id, payment_status="completed", payment_id="pay_123")
    refunded = make_booking(customer["id"], package_id, payment_status="refunded")
    make_booking(customer["id"], package_id)

    response = test_client.get("/api/payments", headers=customer["headers"])

    assert response.status_code == status.HTTP_200_OK
    records = {r["bookingId"]: r for r in response.json()}
    assert set(records) == {paid, refunded}
    assert records[paid]["id"] == "pay_123"
    assert records[paid]["paymentMethod"] == "Online Payment"
    assert records[refunded]["id"] == f"PAY-{refunded}"
    assert records[refunded]["paymentMethod"] == "Direct Payment"
    assert records[paid]["packageName"] == "Kerala Backwaters"


# TEST: POST /api/payments/verify
def test_verify_payment_marks_booking_paid(test_client, customer, package_id, make_booking):
    booking_id = make_booking(customer["id"], package_id)
    body = {
        "bookingId": booking_id,
        "orderId": "order_1",
        "paymentId": "pay_1",
        "signature": payment_signature("order_1", "pay_1"),
    }

    response = test_client.post("/api/payments/verify", json=body, headers=customer["headers"])

    assert response.status_code == status.HTTP_200_OK
    booking = response.json()["booking"]
    assert booking["paymentStatus"] == "completed"
    assert booking["paymentId"] == "pay_1"
    assert booking["status"] == "pending"


def test_verify_payment_rejects_bad_signature(test_client, customer, package_id, make_booking, db_session):
    booking_id = make_booking(customer["id"], package_id)
    body = {"bookingId": booking_id, "orderId": "order_1", "paymentId": "pay_1", "signature": "forged"}

    response = test_client.post("/api/payments/verify", json=body, headers=customer["headers"])

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert db_session.get(Booking, booking_id).payment_status == "pending"


# TEST: /api/auth/me, /api/users/me, /api/users/update-profile
def test_auth_me_creates_profile_once(test_client):
    headers = auth_headers("new-user", email="New.User@Example.com", given_name="New", family_name="User")

    first = test_client.get("/api/auth/me", headers=headers).json()
    second = test_client.get("/api/auth/me", headers=headers).json()

    assert first["id"] == second["id"]
    assert first["email"] == "new.user@example.com"
    assert first["name"] == "New User"
    assert first["role"] == "user"
    assert second["lastLogin"] is not None


def test_users_me_without_local_profile_uses_claims(test_client):
    response = test_client.get("/api/users/me", headers=auth_headers("fresh", email="fresh@example.com", name="Fresh"))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] is None
    assert response.json()["name"] == "Fresh"


def test_update_profile(test_client, customer):
    response = test_client.post(
        "/api/users/update-profile",
        json={"firstName": "Asha", "lastName": "Verma", "phone": "+91 9000000000"},
        headers=customer["headers"],
    )

    assert response.status_code == status.HTTP_200_OK
    user = response.json()["user"]
    assert user["name"] == "Asha Verma"
    assert user["phone"] == "+91 9000000000"
