# src/infrastructure/repositories/flight_repository.py

from datetime import datetime

from sqlalchemy.orm import Session
from sqlalchemy import select

from src.infrastructure.db.models import Flight


class FlightRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, flight_id: str) -> Flight | None:
        stmt = select(Flight).where(Flight.id == flight_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def exists(self, flight_id: str) -> bool:
        stmt = select(Flight.id).where(Flight.id == flight_id)
        return self.db.execute(stmt).first() is not None

    def find_duplicate(
        self,
        airline: str,
        flight_number: str,
        departure_time: datetime,
        exclude_id: str | None = None,
    ) -> Flight | None:
        stmt = (
            select(Flight)
            .where(Flight.airline == airline)
            .where(Flight.flight_number == flight_number)
            .where(Flight.departure_time == departure_time)
        )
        if exclude_id:
            stmt = stmt.where(Flight.id != exclude_id)
        return self.db.execute(stmt).scalars().first()

    def list_all(self) -> list[Flight]:
        stmt = select(Flight).order_by(Flight.departure_time)
        return list(self.db.execute(stmt).scalars().all())

    def search(
        self,
        departure_airport: str,
        arrival_airport: str,
        departs_after: datetime,
        class_type: str | None = None,
    ) -> list[Flight]:
        stmt = (
            select(Flight)
            .where(Flight.departure_airport == departure_airport)
            .where(Flight.arrival_airport == arrival_airport)
            .where(Flight.departure_time >= departs_after)
        )
        if class_type:
            stmt = stmt.where(Flight.class_type == class_type)
        stmt = stmt.order_by(Flight.departure_time)
        return list(self.db.execute(stmt).scalars().all())

    def add(self, flight: Flight) -> Flight:
        self.db.add(flight)
        return flight

    def delete(self, flight: Flight) -> None:
        self.db.delete(flight)
