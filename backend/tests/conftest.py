"""Shared fixtures: in-memory SQLite database and small geo tables."""

import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leadintel.database import Base
from leadintel.geo import AreaCodeEntry, CountryCodeEntry, GeoResolver
from leadintel.models import Lead, User

AREA_CODES = {
    "11": AreaCodeEntry(state_code="SP", city_name="São Paulo", region="Sudeste", state_full_name="São Paulo"),
    "21": AreaCodeEntry(state_code="RJ", city_name="Rio de Janeiro", region="Sudeste", state_full_name="Rio de Janeiro"),
    "51": AreaCodeEntry(state_code="RS", city_name="Porto Alegre", region="Sul", state_full_name="Rio Grande do Sul"),
}

COUNTRY_CODES = {
    "+1": CountryCodeEntry(country="Estados Unidos/Canadá", continent="América do Norte", timezone="UTC-5"),
    "+123": CountryCodeEntry(country="Terra Teste", continent="Oceania"),
    "+351": CountryCodeEntry(country="Portugal", continent="Europa", timezone="UTC+0", language="Português"),
    "+55": CountryCodeEntry(country="Brasil", continent="América do Sul", timezone="UTC-3", language="Português"),
}


class FixedClock:
    """Deterministic clock; each call advances by one second."""

    def __init__(self, start: datetime = datetime(2025, 3, 10, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def area_codes():
    return dict(AREA_CODES)


@pytest.fixture
def country_codes():
    return dict(COUNTRY_CODES)


@pytest.fixture
def resolver(area_codes, country_codes):
    return GeoResolver(area_codes, country_codes)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def admin_user(db_session):
    user = User(id=uuid.uuid4(), name="Admin", email="admin@example.com", role="admin")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def sales_user(db_session):
    user = User(id=uuid.uuid4(), name="Paula Vendas", email="paula@example.com", role="admin")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def lead(db_session):
    lead = Lead(
        id=uuid.uuid4(),
        name="Carlos Mendes",
        email="carlos@example.com",
        company="Auto Center Mendes",
        whatsapp="11987654321",
        message="Quero conhecer os scanners",
        status="new",
    )
    db_session.add(lead)
    db_session.commit()
    return lead
