import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.application.booking_service import to_paise
from src.domain.exceptions import NotFoundError, PersistenceError
from src.domain.state_machine import BookingStateMachine, BookingStatus
from src.infrastructure.db.models import Booking
from src.infrastructure.db.session import unit_of_work
from src.infrastructure.payments.razorpay_gateway import RazorpayGateway
from src.infrastructure.repositories.booking_repository import BookingRepository

logger = logging.getLogger(__name__)


class PaymentService:
    """Gateway order creation and payment confirmation."""

    def __init__(self, db: Session, gateway: RazorpayGateway):
        self.db = db
        self.gateway = gateway
        self.booking_repository = BookingRepository(db)

    def create_order(self, amount: float, currency: str, receipt: str) -> dict:
        return self.gateway.create_order(
            amount_paise=to_paise(amount),
            currency=currency,
            receipt=receipt,
        )

    def verify_payment(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> Booking:
        # Raises SignatureMismatchError before anything is read or written.
        self.gateway.verify_signature(order_id, payment_id, signature)

        try:
            with unit_of_work(self.db):
                booking = self.booking_repository.get_by_order_id(order_id, for_update=True)
                if not booking:
                    raise NotFoundError("Booking not found")

                if booking.status != BookingStatus.PAID:
                    BookingStateMachine.validate_transition(booking.status, BookingStatus.PAID)
                    self.booking_repository.update_status(booking, BookingStatus.PAID)
        except SQLAlchemyError as exc:
            logger.exception(
                "Failed to record payment %s for order %s",
                payment_id,
                order_id,
                extra={"order_id": order_id, "payment_id": payment_id},
            )
            raise PersistenceError("Unable to record payment") from exc

        logger.info("Booking %s paid with payment %s", booking.id, payment_id)
        return booking
