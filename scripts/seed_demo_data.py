from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from src.domain.permissions import AdminPermission
from src.infrastructure.auth.admin_tokens import create_admin_token
from src.infrastructure.db.models import Admin, Base, Flight, User
from src.infrastructure.db.session import engine, get_db_session


def _dt(days_from_now: int, hour: int, minute: int) -> datetime:
    ist = timezone(timedelta(hours=5, minutes=30))
    now_ist = datetime.now(ist)
    target = now_ist + timedelta(days=days_from_now)
    return target.replace(hour=hour, minute=minute, second=0, microsecond=0)


def seed_admin(db) -> Admin:
    email = "ops@example.com"
    admin = db.execute(select(Admin).where(Admin.email == email)).scalar_one_or_none()
    if admin:
        admin.permissions = [AdminPermission.WRITE.value, AdminPermission.DELETE.value]
        return admin

    admin = Admin(
        name="Flight Ops",
        email=email,
        permissions=[AdminPermission.WRITE.value, AdminPermission.DELETE.value],
    )
    db.add(admin)
    db.flush()
    return admin


def seed_user(db) -> User:
    email = "traveller@example.com"
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user:
        return user

    user = User(name="Demo Traveller", email=email)
    db.add(user)
    db.flush()
    return user


def seed_flights(db, admin: Admin) -> None:
    flight_defs = [
        {
            "airline": "IndiGo",
            "flight_number": "6E-2134",
            "departure_airport": "DEL",
            "arrival_airport": "BOM",
            "departure_time": _dt(days_from_now=7, hour=6, minute=15),
            "arrival_time": _dt(days_from_now=7, hour=8, minute=25),
            "duration": "2h 10m",
            "price": 5400,
            "available_seats": 180,
            "class_type": "Economy",
        },
        {
            "airline": "Air India",
            "flight_number": "AI-865",
            "departure_airport": "DEL",
            "arrival_airport": "BOM",
            "departure_time": _dt(days_from_now=7, hour=18, minute=0),
            "arrival_time": _dt(days_from_now=7, hour=20, minute=15),
            "duration": "2h 15m",
            "price": 14200,
            "available_seats": 24,
            "class_type": "Business",
        },
        {
            "airline": "Vistara",
            "flight_number": "UK-996",
            "departure_airport": "BOM",
            "arrival_airport": "DEL",
            "departure_time": _dt(days_from_now=12, hour=9, minute=40),
            "arrival_time": _dt(days_from_now=12, hour=11, minute=50),
            "duration": "2h 10m",
            "price": 6100,
            "available_seats": 150,
            "class_type": "Economy",
        },
    ]

    for item in flight_defs:
        existing = db.execute(
            select(Flight)
            .where(Flight.airline == item["airline"])
            .where(Flight.flight_number == item["flight_number"])
            .where(Flight.departure_time == item["departure_time"])
        ).scalar_one_or_none()
        if existing:
            continue

        flight = Flight(**item, edited_by_admin_id=admin.id)
        db.add(flight)
        admin.managed_flights.append(flight)


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_db_session() as db:
        admin = seed_admin(db)
        user = seed_user(db)
        seed_flights(db, admin)

    print("Demo data seeded successfully.")
    print(f"Admin id: {admin.id}")
    print(f"User id:  {user.id}")
    print(f"Admin token: {create_admin_token(admin.id)}")


if __name__ == "__main__":
    main()
