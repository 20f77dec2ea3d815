import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from src.application.booking_service import BookingService
from src.application.payment_service import PaymentService
from src.domain.exceptions import (
    NotFoundError,
    PaymentGatewayError,
    PersistenceError,
    SignatureMismatchError,
)
from src.domain.state_machine import BookingStatus
from src.infrastructure.db.models import Booking, Flight, User
from src.infrastructure.repositories.booking_repository import BookingRepository


def _booking_count(session) -> int:
    return session.execute(select(func.count()).select_from(Booking)).scalar_one()


def _reference_ids(session, seed) -> tuple[list[str], list[str]]:
    session.expire_all()
    flight = session.get(Flight, seed["flight_id"])
    user = session.get(User, seed["user_id"])
    return [b.id for b in flight.bookings], [b.id for b in user.bookings]


def _create(db_session, gateway, seed, seat="12A"):
    booking, _order = BookingService(db_session, gateway).create_booking(
        flight_id=seed["flight_id"],
        user_id=seed["user_id"],
        seat_number=seat,
        amount=5000,
    )
    return booking


# ---------------------
# CREATION
# ---------------------

def test_created_booking_is_pending_and_linked_both_ways(db_session, gateway, seed):
    booking = _create(db_session, gateway, seed)

    assert booking.status == BookingStatus.PENDING
    assert booking.receipt.startswith("receipt_")
    assert booking.amount_paise == 500000
    assert booking.order_id.startswith("order_")

    flight_refs, user_refs = _reference_ids(db_session, seed)
    assert flight_refs == [booking.id]
    assert user_refs == [booking.id]


def test_each_booking_gets_its_own_receipt(db_session, gateway, seed):
    first = _create(db_session, gateway, seed, seat="1A")
    second = _create(db_session, gateway, seed, seat="1B")

    assert first.receipt != second.receipt
    flight_refs, user_refs = _reference_ids(db_session, seed)
    assert sorted(flight_refs) == sorted(user_refs) == sorted([first.id, second.id])


@pytest.mark.parametrize("missing", ["flight_id", "user_id"])
def test_missing_flight_or_user_creates_nothing(db_session, gateway, razorpay_client, seed, missing):
    ids = dict(seed, **{missing: "does-not-exist"})

    with pytest.raises(NotFoundError):
        BookingService(db_session, gateway).create_booking(
            flight_id=ids["flight_id"],
            user_id=ids["user_id"],
            seat_number="12A",
            amount=5000,
        )

    razorpay_client.order.create.assert_not_called()
    assert _booking_count(db_session) == 0
    assert _reference_ids(db_session, seed) == ([], [])


def test_gateway_refusal_aborts_before_persistence(db_session, gateway, razorpay_client, seed):
    razorpay_client.order.create.side_effect = PaymentGatewayError("refused")

    with pytest.raises(PaymentGatewayError):
        _create(db_session, gateway, seed)

    assert _booking_count(db_session) == 0
    assert _reference_ids(db_session, seed) == ([], [])


def test_store_failure_after_order_rolls_back_everything(db_session, gateway, razorpay_client, seed, monkeypatch):
    def broken_attach(self, booking):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(BookingRepository, "attach_references", broken_attach)

    with pytest.raises(PersistenceError):
        _create(db_session, gateway, seed)

    # The gateway order was already placed and is left unused.
    razorpay_client.order.create.assert_called_once()
    assert _booking_count(db_session) == 0
    assert _reference_ids(db_session, seed) == ([], [])


# ---------------------
# DELETION
# ---------------------

def test_delete_pulls_references_and_second_delete_is_not_found(db_session, gateway, seed):
    booking = _create(db_session, gateway, seed)
    service = BookingService(db_session)

    service.delete_booking(booking.id)

    assert _booking_count(db_session) == 0
    assert _reference_ids(db_session, seed) == ([], [])
    with pytest.raises(NotFoundError):
        service.delete_booking(booking.id)


def test_delete_leaves_other_bookings_in_place(db_session, gateway, seed):
    kept = _create(db_session, gateway, seed, seat="3C")
    removed = _create(db_session, gateway, seed, seat="3D")

    BookingService(db_session).delete_booking(removed.id)

    assert _reference_ids(db_session, seed) == ([kept.id], [kept.id])


def test_failed_delete_keeps_booking_and_references(db_session, gateway, seed, monkeypatch):
    booking = _create(db_session, gateway, seed)
    original_delete = BookingRepository.delete_booking

    def delete_then_fail(self, target):
        original_delete(self, target)
        raise OperationalError("DELETE", {}, Exception("connection lost"))

    monkeypatch.setattr(BookingRepository, "delete_booking", delete_then_fail)

    with pytest.raises(PersistenceError):
        BookingService(db_session).delete_booking(booking.id)

    assert _booking_count(db_session) == 1
    assert _reference_ids(db_session, seed) == ([booking.id], [booking.id])


# ---------------------
# PAYMENT VERIFICATION
# ---------------------

def test_verified_payment_marks_booking_paid(db_session, gateway, seed, signer):
    booking = _create(db_session, gateway, seed)

    paid = PaymentService(db_session, gateway).verify_payment(
        order_id=booking.order_id,
        payment_id="pay_001",
        signature=signer(booking.order_id, "pay_001"),
    )

    assert paid.id == booking.id
    db_session.expire_all()
    assert db_session.get(Booking, booking.id).status == BookingStatus.PAID


def test_forged_signature_leaves_booking_pending(db_session, gateway, seed, signer):
    booking = _create(db_session, gateway, seed)
    signature = signer(booking.order_id, "pay_001")
    forged = ("1" if signature[0] == "0" else "0") + signature[1:]

    with pytest.raises(SignatureMismatchError):
        PaymentService(db_session, gateway).verify_payment(booking.order_id, "pay_001", forged)

    db_session.expire_all()
    assert db_session.get(Booking, booking.id).status == BookingStatus.PENDING


def test_valid_signature_for_unknown_order_is_not_found(db_session, gateway, seed, signer):
    with pytest.raises(NotFoundError):
        PaymentService(db_session, gateway).verify_payment(
            "order_unknown", "pay_001", signer("order_unknown", "pay_001")
        )


def test_repeated_verification_is_idempotent(db_session, gateway, seed, signer):
    booking = _create(db_session, gateway, seed)
    service = PaymentService(db_session, gateway)
    signature = signer(booking.order_id, "pay_001")

    service.verify_payment(booking.order_id, "pay_001", signature)
    again = service.verify_payment(booking.order_id, "pay_001", signature)

    assert again.status == BookingStatus.PAID


def test_create_order_converts_to_paise(db_session, gateway, razorpay_client):
    order = PaymentService(db_session, gateway).create_order(
        amount=12.5, currency="INR", receipt="receipt_manual"
    )

    assert order["amount"] == 1250
    assert order["receipt"] == "receipt_manual"


def test_booking_keeps_generated_receipt_when_gateway_omits_it(db_session, gateway, razorpay_client, seed):
    razorpay_client.order.create.side_effect = None
    razorpay_client.order.create.return_value = {"id": "order_no_receipt", "status": "created"}

    booking = _create(db_session, gateway, seed)

    sent_receipt = razorpay_client.order.create.call_args.kwargs["data"]["receipt"]
    assert booking.receipt == sent_receipt
    assert booking.order_id == "order_no_receipt"


def test_create_without_gateway_is_rejected(db_session, seed):
    with pytest.raises(PaymentGatewayError):
        BookingService(db_session).create_booking(
            flight_id=seed["flight_id"],
            user_id=seed["user_id"],
            seat_number="12A",
            amount=5000,
        )

    assert _booking_count(db_session) == 0
