from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from bookable.config import get_settings
from bookable.db.session import Base
from bookable.db import models, schemas


ROOM = schemas.OwnerRef(type="room", id="1")
OTHER_ROOM = schemas.OwnerRef(type="room", id="2")


def at(hour: int, minute: int = 0, second: int = 0, day: int = 2) -> datetime:
    return datetime(2026, 3, day, hour, minute, second, tzinfo=timezone.utc)


def make_booking(
    starts_at=None,
    ends_at=None,
    canceled_at=None,
    owner=ROOM,
    booking_id=None,
) -> schemas.Booking:
    return schemas.Booking(
        id=booking_id,
        owner=owner,
        starts_at=starts_at,
        ends_at=ends_at,
        canceled_at=canceled_at,
    )


def add_booking(session, starts_at=None, ends_at=None, canceled_at=None, owner=ROOM) -> models.Booking:
    booking = models.Booking(
        bookable_type=owner.type,
        bookable_id=owner.id,
        starts_at=starts_at,
        ends_at=ends_at,
        canceled_at=canceled_at,
    )
    session.add(booking)
    session.commit()
    session.refresh(booking)
    return booking


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    monkeypatch.delenv("TIMEZONE", raising=False)
    monkeypatch.delenv("OVERLAP_RESOLUTION_US", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
