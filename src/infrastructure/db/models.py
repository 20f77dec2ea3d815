# src/infrastructure/db/models.py

from sqlalchemy import (
    String,
    Integer,
    Float,
    DateTime,
    Enum,
    JSON,
    Column,
    Table,
    UniqueConstraint,
    CheckConstraint,
    ForeignKey,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from uuid import uuid4

from src.infrastructure.db.session import Base
from src.domain.state_machine import BookingStatus


admin_managed_flights = Table(
    "admin_managed_flights",
    Base.metadata,
    Column("admin_id", String(36), ForeignKey("admins.id"), primary_key=True),
    Column("flight_id", String(36), ForeignKey("flights.id"), primary_key=True),
)


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    managed_flights: Mapped[list["Flight"]] = relationship(
        secondary=admin_managed_flights,
        back_populates="managing_admins",
    )

    def has_permission(self, permission: str) -> bool:
        return permission in (self.permissions or [])


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    bookings: Mapped[list["Booking"]] = relationship(back_populates="user")


class Flight(Base):
    __tablename__ = "flights"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    airline: Mapped[str] = mapped_column(String(64), nullable=False)
    flight_number: Mapped[str] = mapped_column(String(16), nullable=False)
    departure_airport: Mapped[str] = mapped_column(String(8), nullable=False)
    arrival_airport: Mapped[str] = mapped_column(String(8), nullable=False)
    departure_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    arrival_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[str] = mapped_column(String(32), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    class_type: Mapped[str] = mapped_column(String(32), nullable=False)
    edited_by_admin_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("admins.id"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    bookings: Mapped[list["Booking"]] = relationship(back_populates="flight")
    managing_admins: Mapped[list[Admin]] = relationship(
        secondary=admin_managed_flights,
        back_populates="managed_flights",
    )

    __table_args__ = (
        UniqueConstraint(
            "airline",
            "flight_number",
            "departure_time",
            name="uq_flight_airline_number_departure",
        ),
        CheckConstraint("price > 0", name="ck_flight_price_positive"),
        CheckConstraint("available_seats > 0", name="ck_flight_available_seats_positive"),
    )


class Booking(Base):
    """
    Seat reservation tied to one gateway order.
    Flight and User hold shared references to it;
    status is only moved to Paid by payment verification.
    """

    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    flight_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("flights.id"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
    )
    seat_number: Mapped[str] = mapped_column(String(8), nullable=False)
    booking_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status",
            values_callable=lambda statuses: [item.value for item in statuses],
        ),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    receipt: Mapped[str] = mapped_column(String(40), nullable=False)
    order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="INR")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    flight: Mapped[Flight] = relationship(back_populates="bookings")
    user: Mapped[User] = relationship(back_populates="bookings")

    __table_args__ = (
        UniqueConstraint("receipt", name="uq_booking_receipt"),
        UniqueConstraint("order_id", name="uq_booking_order_id"),
        CheckConstraint("amount_paise > 0", name="ck_booking_amount_positive"),
    )
