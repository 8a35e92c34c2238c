"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other. API tests run the real app
against that same session, with tokens signed by `TEST_SECRET`.
"""
from __future__ import annotations

import os
import time
from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace

import jwt
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Must be set before anything imports mca_api.settings.
os.environ.setdefault("MCA_DB_URL", "sqlite://")
os.environ.setdefault("MCA_SEED_DEMO_DATA", "false")

TEST_DB_URL = "sqlite://"
TEST_SECRET = "test-secret-with-enough-bytes-for-hs256"
CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "security_config.yaml"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    import mca_api.models  # noqa: F401
    from mca_api.db.base import Base

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    Handler commits stay inside the outer transaction, so the next test gets a
    clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def security_config():
    from mca_api.security.config import load_security_config

    return load_security_config(CONFIG_PATH)


@pytest.fixture
def app(db_session, security_config):
    """The real app with startup work done by hand (no lifespan, no demo seed)."""
    from mca_api.db.session import get_db
    from mca_api.main import create_app
    from mca_api.security.tokens import AccessTokenValidator

    application = create_app()
    application.state.security_config = security_config
    application.state.token_validator = AccessTokenValidator(TEST_SECRET)

    def _get_db():
        yield db_session

    application.dependency_overrides[get_db] = _get_db
    return application


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


def make_token(principal_id: str, portal: str, secret: str = TEST_SECRET, ttl: int = 300, **claims) -> str:
    now = int(time.time())
    payload = {"id": principal_id, "portal": portal, "iat": now, "exp": now + ttl, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def headers_for() -> Callable[..., dict[str, str]]:
    """`headers_for("user-1", "funder", role=..., filter={...})` -> Authorization header."""

    def _headers(principal_id: str, portal: str, **claims) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(principal_id, portal, **claims)}"}

    return _headers


@pytest.fixture
def book(db_session):
    """
    A small book of business:

        funder F1 (lenders L1, L1X)      funder F2 (lender L2)
        ISO I1 works with F1, merchant M1
        merchants M1 (F1), M2 (F2)
        syndicator S1 works with F1 and lender L1
        fundings FN1 (F1/L1/M1/I1) and FN2 (F2/L2/M2)

    plus one login per portal.
    """
    from mca_api.models import (
        ISO,
        Admin,
        Bookkeeper,
        Contact,
        Funder,
        Funding,
        ISOFunder,
        ISOMerchant,
        Lender,
        Merchant,
        MerchantFunder,
        Representative,
        Syndicator,
        SyndicatorFunder,
        SyndicatorLender,
        User,
    )

    db_session.add_all(
        [
            Funder(id="F1", name="Acme Capital"),
            Funder(id="F2", name="Beacon Funding"),
            ISO(id="I1", name="Main Street Brokers"),
            Merchant(id="M1", name="Corner Bakery"),
            Merchant(id="M2", name="Route 9 Diner"),
            Syndicator(id="S1", name="Sam Participations"),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            Lender(id="L1", funder_id="F1", name="Acme Capital LLC"),
            Lender(id="L1X", funder_id="F1", name="Harbor Partners", internal=False),
            Lender(id="L2", funder_id="F2", name="Beacon Funding LLC"),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            ISOFunder(iso_id="I1", funder_id="F1"),
            ISOMerchant(iso_id="I1", merchant_id="M1"),
            MerchantFunder(merchant_id="M1", funder_id="F1"),
            MerchantFunder(merchant_id="M2", funder_id="F2"),
            SyndicatorFunder(syndicator_id="S1", funder_id="F1"),
            SyndicatorLender(syndicator_id="S1", lender_id="L1"),
            Funding(id="FN1", name="Bakery #1", funder_id="F1", lender_id="L1", merchant_id="M1", iso_id="I1"),
            Funding(id="FN2", name="Diner #1", funder_id="F2", lender_id="L2", merchant_id="M2"),
            Admin(id="A1", first_name="Alice", last_name="Admin", email="alice@example.com"),
            Bookkeeper(id="B1", first_name="Bob", last_name="Books", email="bob@example.com"),
            User(id="U1", first_name="Mona", last_name="Manager", email="mona@example.com", type="funder_manager"),
            User(id="U2", first_name="Fred", last_name="User", email="fred@example.com"),
            User(id="LU1", first_name="Lena", last_name="Lender", email="lena@example.com", type="lender"),
            Representative(id="R1", first_name="Ivan", last_name="Broker", email="ivan@example.com"),
            Contact(id="C1", first_name="Carla", last_name="Baker", email="carla@example.com"),
        ]
    )
    db_session.commit()

    return SimpleNamespace(
        funders=("F1", "F2"),
        lenders=("L1", "L1X", "L2"),
        fundings=("FN1", "FN2"),
    )
