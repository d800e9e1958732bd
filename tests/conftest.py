"""Shared fixtures: a throwaway SQLite database, seeded directory records and an API client."""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["TIMEZONE"] = "UTC"

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.database import Base, get_db
from app.main import app
from app.models import Ground, Payment, User
from app.schemas.booking import BookingCreate

BOOKING_DAY = date.today() + timedelta(days=3)


def at(hour: int, minute: int = 0) -> datetime:
    """Local datetime on the booking day."""
    return datetime.combine(BOOKING_DAY, time(hour, minute))


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def ground(db):
    ground = Ground(
        name="Main Cricket Ground",
        location="Colombo 07",
        price_per_slot=Decimal("2500.00"),
        slot_count=2,
        facilities=["floodlights", "nets"],
    )
    db.add(ground)
    await db.commit()
    return ground


@pytest.fixture
async def customer(db):
    user = User(first_name="Jane", last_name="Doe", email="jane@example.com", phone="0771234567")
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def other_customer(db):
    user = User(first_name="John", last_name="Smith", email="john@example.com")
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def successful_payment(db):
    payment = Payment(amount=Decimal("2500.00"), status="success", payment_date=datetime.utcnow())
    db.add(payment)
    await db.commit()
    return payment


@pytest.fixture
async def failed_payment(db):
    payment = Payment(amount=Decimal("2500.00"), status="failed")
    db.add(payment)
    await db.commit()
    return payment


@pytest.fixture
def make_booking(ground, customer):
    """Build booking input for the seeded ground and customer."""

    def _make(start: str = "10:00", end: str = "11:00", **overrides) -> BookingCreate:
        fields = {
            "customer_id": customer.id,
            "ground_id": ground.id,
            "booking_date": BOOKING_DAY,
            "start_time": start,
            "end_time": end,
            "booking_type": "practice",
            "amount": "2500",
        }
        fields.update(overrides)
        return BookingCreate(**fields)

    return _make


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
