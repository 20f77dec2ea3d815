from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StrictInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class UserCreate(StrictInput):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    bookings: list[str]


class UserEnvelope(BaseModel):
    user: UserResponse


class FlightCreate(StrictInput):
    airline: str = Field(min_length=1)
    flight_number: str = Field(min_length=1)
    departure_airport: str = Field(min_length=1)
    arrival_airport: str = Field(min_length=1)
    departure_time: datetime
    arrival_time: datetime
    duration: str = Field(min_length=1)
    price: float = Field(gt=0)
    available_seats: int = Field(gt=0)
    class_type: str = Field(min_length=1)
    admin_id: str = Field(min_length=1)


class FlightUpdate(StrictInput):
    airline: str | None = Field(default=None, min_length=1)
    flight_number: str | None = Field(default=None, min_length=1)
    departure_airport: str | None = Field(default=None, min_length=1)
    arrival_airport: str | None = Field(default=None, min_length=1)
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    duration: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, gt=0)
    available_seats: int | None = Field(default=None, gt=0)
    class_type: str | None = Field(default=None, min_length=1)


class FlightResponse(BaseModel):
    id: str
    airline: str
    flight_number: str
    departure_airport: str
    arrival_airport: str
    departure_time: str
    arrival_time: str
    duration: str
    price: float
    available_seats: int
    class_type: str
    bookings: list[str]
    edited_by_admin_id: str | None = None


class FlightEnvelope(BaseModel):
    flight: FlightResponse


class FlightListResponse(BaseModel):
    flights: list[FlightResponse]
    return_flights: list[FlightResponse] | None = None


class BookingRequest(StrictInput):
    flight_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    seat_number: str = Field(min_length=1, max_length=8)
    amount: float = Field(ge=0.01)


class BookingResponse(BaseModel):
    id: str
    flight_id: str
    user_id: str
    seat_number: str
    booking_date: str
    status: str
    receipt: str
    order_id: str
    amount: int
    currency: str
    key_id: str | None = None


class BookingEnvelope(BaseModel):
    booking: BookingResponse


class MessageResponse(BaseModel):
    message: str


class PaymentOrderRequest(StrictInput):
    amount: float = Field(ge=0.01)
    currency: str = Field(default="INR", min_length=3, max_length=3)
    receipt: str = Field(min_length=1, max_length=40)


class RazorpayVerifyRequest(StrictInput):
    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)


class PaymentVerifiedResponse(BaseModel):
    message: str
    booking: BookingResponse
