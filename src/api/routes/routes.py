from datetime import date
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.infrastructure.db.session import SessionLocal
from src.application.booking_service import BookingService
from src.application.flight_service import FlightService
from src.application.payment_service import PaymentService
from src.application.user_service import UserService
from src.api.schemas.schemas import (
    UserCreate,
    UserResponse,
    UserEnvelope,
    FlightCreate,
    FlightUpdate,
    FlightResponse,
    FlightEnvelope,
    FlightListResponse,
    BookingRequest,
    BookingResponse,
    BookingEnvelope,
    MessageResponse,
    PaymentOrderRequest,
    RazorpayVerifyRequest,
    PaymentVerifiedResponse,
)
from src.domain.exceptions import (
    ConfigurationError,
    NotFoundError,
    ConflictError,
    UnauthorizedError,
    ForbiddenError,
    PaymentGatewayError,
    SignatureMismatchError,
    PersistenceError,
    InvalidStateTransitionError,
)
from src.infrastructure.auth.admin_tokens import resolve_admin_id
from src.infrastructure.db.models import Booking, Flight, User
from src.infrastructure.payments.razorpay_gateway import RazorpayGateway, get_payment_gateway


router = APIRouter()
logger = logging.getLogger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_gateway() -> RazorpayGateway:
    try:
        return get_payment_gateway()
    except PaymentGatewayError as exc:
        logger.error("Payment gateway unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc


def get_admin_id(authorization: str | None = Header(default=None)) -> str:
    try:
        return resolve_admin_id(authorization)
    except UnauthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except ConfigurationError as exc:
        logger.error("Admin token verification unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc


def _flight_response(flight: Flight) -> FlightResponse:
    return FlightResponse(
        id=flight.id,
        airline=flight.airline,
        flight_number=flight.flight_number,
        departure_airport=flight.departure_airport,
        arrival_airport=flight.arrival_airport,
        departure_time=flight.departure_time.isoformat(),
        arrival_time=flight.arrival_time.isoformat(),
        duration=flight.duration,
        price=flight.price,
        available_seats=flight.available_seats,
        class_type=flight.class_type,
        bookings=[booking.id for booking in flight.bookings],
        edited_by_admin_id=flight.edited_by_admin_id,
    )


def _booking_response(booking: Booking, key_id: str | None = None) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        flight_id=booking.flight_id,
        user_id=booking.user_id,
        seat_number=booking.seat_number,
        booking_date=booking.booking_date.isoformat(),
        status=booking.status.value,
        receipt=booking.receipt,
        order_id=booking.order_id,
        amount=booking.amount_paise,
        currency=booking.currency,
        key_id=key_id,
    )


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        bookings=[booking.id for booking in user.bookings],
    )


@router.get("/health")
def health():
    return {"message": "Flight booking service is running"}


# -----------------------------
# Users
# -----------------------------
@router.post("/users", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(
    request: UserCreate,
    db: Session = Depends(get_db),
):
    try:
        user = UserService(db).create_user(name=request.name, email=request.email)
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return UserEnvelope(user=_user_response(user))


@router.get("/users/{user_id}", response_model=UserEnvelope)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
):
    try:
        user = UserService(db).get_user(user_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return UserEnvelope(user=_user_response(user))


# -----------------------------
# Flights
# -----------------------------
@router.post("/flights", response_model=FlightEnvelope, status_code=status.HTTP_201_CREATED)
def create_flight(
    request: FlightCreate,
    db: Session = Depends(get_db),
):
    fields = request.model_dump(exclude={"admin_id"})
    try:
        flight = FlightService(db).create_flight(fields, admin_id=request.admin_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return FlightEnvelope(flight=_flight_response(flight))


@router.get("/flights", response_model=FlightListResponse, response_model_exclude_none=True)
def list_flights(db: Session = Depends(get_db)):
    flights = FlightService(db).list_flights()
    return FlightListResponse(flights=[_flight_response(flight) for flight in flights])


@router.get("/flights/search", response_model=FlightListResponse, response_model_exclude_none=True)
def search_flights(
    departure_airport: str = Query(alias="from", min_length=1),
    arrival_airport: str = Query(alias="to", min_length=1),
    departure_date: date = Query(),
    return_date: date | None = Query(default=None),
    class_type: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    flights, return_flights = FlightService(db).search_flights(
        departure_airport=departure_airport,
        arrival_airport=arrival_airport,
        departure_date=departure_date,
        return_date=return_date,
        class_type=class_type,
    )
    return FlightListResponse(
        flights=[_flight_response(flight) for flight in flights],
        return_flights=(
            [_flight_response(flight) for flight in return_flights]
            if return_flights is not None
            else None
        ),
    )


@router.get("/flights/{flight_id}", response_model=FlightEnvelope)
def get_flight(
    flight_id: str,
    db: Session = Depends(get_db),
):
    try:
        flight = FlightService(db).get_flight(flight_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return FlightEnvelope(flight=_flight_response(flight))


@router.put("/flights/{flight_id}", response_model=FlightEnvelope)
def update_flight(
    flight_id: str,
    request: FlightUpdate,
    admin_id: str = Depends(get_admin_id),
    db: Session = Depends(get_db),
):
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    try:
        flight = FlightService(db).update_flight(flight_id, changes, admin_id=admin_id)
    except ForbiddenError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        ) from exc
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return FlightEnvelope(flight=_flight_response(flight))


@router.delete("/flights/{flight_id}", response_model=MessageResponse)
def delete_flight(
    flight_id: str,
    admin_id: str = Depends(get_admin_id),
    db: Session = Depends(get_db),
):
    try:
        FlightService(db).delete_flight(flight_id, admin_id=admin_id)
    except ForbiddenError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        ) from exc
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return MessageResponse(message="Flight deleted successfully")


# -----------------------------
# Bookings
# -----------------------------
@router.post("/bookings", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingRequest,
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_gateway),
):
    service = BookingService(db, gateway)

    try:
        booking, _order = service.create_booking(
            flight_id=request.flight_id,
            user_id=request.user_id,
            seat_number=request.seat_number,
            amount=request.amount,
        )
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except (PaymentGatewayError, PersistenceError) as exc:
        logger.error(
            "Error creating booking: %s",
            exc,
            extra={"flight_id": request.flight_id, "user_id": request.user_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create booking",
        ) from exc

    return BookingEnvelope(booking=_booking_response(booking, key_id=gateway.key_id))


@router.get("/bookings/{booking_id}", response_model=BookingEnvelope)
def get_booking(
    booking_id: str,
    db: Session = Depends(get_db),
):
    try:
        booking = BookingService(db).get_booking(booking_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return BookingEnvelope(booking=_booking_response(booking))


@router.delete("/bookings/{booking_id}", response_model=MessageResponse)
def delete_booking(
    booking_id: str,
    db: Session = Depends(get_db),
):
    try:
        BookingService(db).delete_booking(booking_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to Delete",
        ) from exc
    return MessageResponse(message="Successfully Deleted")


# -----------------------------
# Payments
# -----------------------------
@router.post("/payments/orders", status_code=status.HTTP_201_CREATED)
def create_payment_order(
    request: PaymentOrderRequest,
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_gateway),
):
    try:
        return PaymentService(db, gateway).create_order(
            amount=request.amount,
            currency=request.currency,
            receipt=request.receipt,
        )
    except PaymentGatewayError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to create order",
        ) from exc


@router.post("/payments/verify", response_model=PaymentVerifiedResponse)
def verify_payment(
    request: RazorpayVerifyRequest,
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_gateway),
):
    service = PaymentService(db, gateway)

    try:
        booking = service.verify_payment(
            order_id=request.razorpay_order_id,
            payment_id=request.razorpay_payment_id,
            signature=request.razorpay_signature,
        )
    except SignatureMismatchError as exc:
        logger.warning(
            "Rejected payment confirmation for order %s",
            request.razorpay_order_id,
            extra={"order_id": request.razorpay_order_id},
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        ) from exc
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except InvalidStateTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        ) from exc

    return PaymentVerifiedResponse(
        message="Payment verified successfully",
        booking=_booking_response(booking),
    )
