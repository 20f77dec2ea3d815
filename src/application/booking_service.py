import logging
import os
import time
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.domain.exceptions import NotFoundError, PaymentGatewayError, PersistenceError
from src.infrastructure.db.models import Booking
from src.infrastructure.db.session import unit_of_work
from src.infrastructure.payments.razorpay_gateway import RazorpayGateway
from src.infrastructure.repositories.booking_repository import BookingRepository
from src.infrastructure.repositories.flight_repository import FlightRepository
from src.infrastructure.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


def new_receipt() -> str:
    return f"receipt_{int(time.time() * 1000)}_{uuid4().hex[:8]}"


class BookingService:
    """
    Application service coordinating booking workflow.

    Creation runs in two phases: the gateway order is created first,
    then the booking row and both back-references are written in a
    single unit of work. A local failure after the gateway call leaves
    an unused order at the provider; it is logged, never retried.
    """

    def __init__(self, db: Session, gateway: RazorpayGateway | None = None):
        self.db = db
        self.gateway = gateway
        self.booking_repository = BookingRepository(db)
        self.flight_repository = FlightRepository(db)
        self.user_repository = UserRepository(db)
        self.currency = os.getenv("PAYMENT_CURRENCY", "INR")

    def create_booking(
        self,
        flight_id: str,
        user_id: str,
        seat_number: str,
        amount: float,
    ) -> tuple[Booking, dict]:
        flight = self.flight_repository.get_by_id(flight_id)
        if not flight:
            raise NotFoundError("Flight not found with the given ID")

        user = self.user_repository.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found with the given ID")

        if self.gateway is None:
            raise PaymentGatewayError("Payment gateway is required to create bookings")

        amount_paise = to_paise(amount)
        receipt = new_receipt()
        order = self.gateway.create_order(
            amount_paise=amount_paise,
            currency=self.currency,
            receipt=receipt,
        )

        try:
            with unit_of_work(self.db):
                booking = self.booking_repository.create_booking(
                    flight=flight,
                    user=user,
                    seat_number=seat_number,
                    receipt=receipt,
                    order_id=order["id"],
                    amount_paise=amount_paise,
                    currency=order.get("currency", self.currency),
                )
                self.booking_repository.attach_references(booking)
        except SQLAlchemyError as exc:
            logger.warning(
                "Booking not persisted; gateway order %s left unused",
                order["id"],
                extra={"order_id": order["id"], "flight_id": flight_id, "user_id": user_id},
            )
            raise PersistenceError("Failed to create booking") from exc

        logger.info(
            "Booking %s created for flight %s with order %s",
            booking.id,
            flight_id,
            booking.order_id,
        )
        return booking, order

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def delete_booking(self, booking_id: str) -> None:
        try:
            with unit_of_work(self.db):
                booking = self.booking_repository.get_by_id(booking_id)
                if not booking:
                    raise NotFoundError("Booking not found")
                self.booking_repository.delete_booking(booking)
        except SQLAlchemyError as exc:
            logger.exception(
                "Failed to delete booking %s",
                booking_id,
                extra={"booking_id": booking_id},
            )
            raise PersistenceError("Unable to delete booking") from exc

        logger.info("Booking %s deleted", booking_id)
