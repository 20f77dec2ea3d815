from datetime import datetime
import hashlib
import hmac
import os
from unittest.mock import MagicMock
from uuid import uuid4

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import razorpay
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.routes.routes import get_db, get_gateway
from src.domain.permissions import AdminPermission
from src.infrastructure.auth.admin_tokens import create_admin_token
from src.infrastructure.db.models import Admin, Base, Flight, User
from src.infrastructure.db.session import build_engine
from src.infrastructure.payments.razorpay_gateway import RazorpayGateway
from src.main import app

KEY_ID = "rzp_test_key"
KEY_SECRET = "rzp_test_secret"


def sign(order_id: str, payment_id: str, secret: str = KEY_SECRET) -> str:
    body = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def _fake_order(data, **kwargs):
    return {
        "id": f"order_{uuid4().hex[:14]}",
        "entity": "order",
        "amount": data["amount"],
        "currency": data["currency"],
        "receipt": data["receipt"],
        "status": "created",
    }


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite+pysqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def razorpay_client():
    client = razorpay.Client(auth=(KEY_ID, KEY_SECRET))
    client.order = MagicMock()
    client.order.create.side_effect = _fake_order
    return client


@pytest.fixture
def gateway(razorpay_client):
    return RazorpayGateway(
        key_id=KEY_ID,
        key_secret=KEY_SECRET,
        timeout=5,
        client=razorpay_client,
    )


@pytest.fixture
def seed(db_session):
    admin = Admin(
        name="Ops",
        email="ops@example.com",
        permissions=[AdminPermission.WRITE.value, AdminPermission.DELETE.value],
    )
    reader = Admin(name="Reader", email="reader@example.com", permissions=[])
    user = User(name="Asha", email="asha@example.com")
    flight = Flight(
        airline="IndiGo",
        flight_number="6E-2134",
        departure_airport="DEL",
        arrival_airport="BOM",
        departure_time=datetime.fromisoformat("2024-01-05T06:15:00"),
        arrival_time=datetime.fromisoformat("2024-01-05T08:25:00"),
        duration="2h 10m",
        price=5000,
        available_seats=180,
        class_type="Economy",
    )
    db_session.add_all([admin, reader, user, flight])
    admin.managed_flights.append(flight)
    db_session.commit()
    return {
        "admin_id": admin.id,
        "reader_id": reader.id,
        "user_id": user.id,
        "flight_id": flight.id,
    }


@pytest.fixture
def admin_token(seed):
    return create_admin_token(seed["admin_id"])


@pytest.fixture
def reader_token(seed):
    return create_admin_token(seed["reader_id"])


@pytest.fixture
def client(session_factory, gateway):
    def override_get_db():
        db = session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signer():
    return sign
