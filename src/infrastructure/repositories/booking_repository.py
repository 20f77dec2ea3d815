# src/infrastructure/repositories/booking_repository.py

from datetime import datetime, timezone

from sqlalchemy.orm import Session
from sqlalchemy import select

from src.infrastructure.db.models import Booking, Flight, User
from src.domain.state_machine import BookingStatus


class BookingRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(
        self,
        booking_id: str,
    ) -> Booking | None:

        stmt = select(Booking).where(Booking.id == booking_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_order_id(
        self,
        order_id: str,
        for_update: bool = False,
    ) -> Booking | None:

        stmt = select(Booking).where(Booking.order_id == order_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def create_booking(
        self,
        flight: Flight,
        user: User,
        seat_number: str,
        receipt: str,
        order_id: str,
        amount_paise: int,
        currency: str,
    ) -> Booking:

        booking = Booking(
            flight=flight,
            user=user,
            seat_number=seat_number,
            receipt=receipt,
            order_id=order_id,
            amount_paise=amount_paise,
            currency=currency,
            status=BookingStatus.PENDING,
            booking_date=datetime.now(timezone.utc),
        )

        self.db.add(booking)
        return booking

    def attach_references(self, booking: Booking) -> None:
        """Push the booking onto its flight's and user's booking lists."""
        if booking not in booking.flight.bookings:
            booking.flight.bookings.append(booking)
        if booking not in booking.user.bookings:
            booking.user.bookings.append(booking)

    def delete_booking(self, booking: Booking) -> None:
        flight = booking.flight
        user = booking.user

        if booking in flight.bookings:
            flight.bookings.remove(booking)
        if booking in user.bookings:
            user.bookings.remove(booking)

        self.db.delete(booking)

    def update_status(
        self,
        booking: Booking,
        new_status: BookingStatus,
    ) -> None:

        booking.status = new_status
