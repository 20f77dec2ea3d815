import logging
from datetime import date, datetime, time

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.domain.exceptions import ConflictError, ForbiddenError, NotFoundError
from src.domain.permissions import AdminPermission
from src.infrastructure.db.models import Admin, Flight
from src.infrastructure.db.session import unit_of_work
from src.infrastructure.repositories.admin_repository import AdminRepository
from src.infrastructure.repositories.flight_repository import FlightRepository

logger = logging.getLogger(__name__)

_UNIQUE_FIELDS = ("airline", "flight_number", "departure_time")


class FlightService:
    """Flight directory: keyed lookups, search and admin-guarded writes."""

    def __init__(self, db: Session):
        self.db = db
        self.flight_repository = FlightRepository(db)
        self.admin_repository = AdminRepository(db)

    def get_flight(self, flight_id: str) -> Flight:
        flight = self.flight_repository.get_by_id(flight_id)
        if not flight:
            raise NotFoundError("Flight not found")
        return flight

    def flight_exists(self, flight_id: str) -> bool:
        return self.flight_repository.exists(flight_id)

    def list_flights(self) -> list[Flight]:
        return self.flight_repository.list_all()

    def search_flights(
        self,
        departure_airport: str,
        arrival_airport: str,
        departure_date: date,
        return_date: date | None = None,
        class_type: str | None = None,
    ) -> tuple[list[Flight], list[Flight] | None]:
        flights = self.flight_repository.search(
            departure_airport,
            arrival_airport,
            datetime.combine(departure_date, time.min),
            class_type,
        )
        if return_date is None:
            return flights, None

        return_flights = self.flight_repository.search(
            arrival_airport,
            departure_airport,
            datetime.combine(return_date, time.min),
            class_type,
        )
        return flights, return_flights

    def create_flight(self, fields: dict, admin_id: str) -> Flight:
        admin = self.admin_repository.get_by_id(admin_id)
        if not admin:
            raise NotFoundError("Admin not found")

        if self.flight_repository.find_duplicate(
            fields["airline"], fields["flight_number"], fields["departure_time"]
        ):
            raise ConflictError("Flight already exists")

        try:
            with unit_of_work(self.db):
                flight = self.flight_repository.add(
                    Flight(**fields, edited_by_admin_id=admin.id)
                )
                admin.managed_flights.append(flight)
        except IntegrityError as exc:
            raise ConflictError("Flight already exists") from exc

        logger.info("Flight %s created by admin %s", flight.id, admin.id)
        return flight

    def update_flight(self, flight_id: str, changes: dict, admin_id: str) -> Flight:
        self._authorize(admin_id, AdminPermission.WRITE, "Unauthorized to update flight")

        flight = self.get_flight(flight_id)
        if any(key in changes for key in _UNIQUE_FIELDS):
            candidate = {key: changes.get(key, getattr(flight, key)) for key in _UNIQUE_FIELDS}
            if self.flight_repository.find_duplicate(**candidate, exclude_id=flight.id):
                raise ConflictError("Flight already exists")

        try:
            with unit_of_work(self.db):
                for key, value in changes.items():
                    setattr(flight, key, value)
                flight.edited_by_admin_id = admin_id
        except IntegrityError as exc:
            raise ConflictError("Flight update conflicts with an existing flight") from exc

        logger.info("Flight %s updated by admin %s", flight.id, admin_id)
        return flight

    def delete_flight(self, flight_id: str, admin_id: str) -> None:
        self._authorize(admin_id, AdminPermission.DELETE, "Unauthorized to delete flight")

        with unit_of_work(self.db):
            flight = self.get_flight(flight_id)
            if flight.bookings:
                raise ConflictError("Flight still has bookings")
            self.flight_repository.delete(flight)

        logger.info("Flight %s deleted by admin %s", flight_id, admin_id)

    def _authorize(self, admin_id: str, permission: AdminPermission, message: str) -> Admin:
        admin = self.admin_repository.get_by_id(admin_id)
        if not admin:
            raise NotFoundError("Admin not found")
        if not admin.has_permission(permission.value):
            raise ForbiddenError(message)
        return admin
