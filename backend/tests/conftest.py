"""
Shared test configuration: an in-memory SQLite database per test and a
FastAPI TestClient whose `get_db` dependency points at it.
"""

import os
import tempfile

# Must be set before anything imports database.py or main.py
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "dairy_ledger_test_logs"))

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, get_db
from main import app
from crud import ledger_account as ledger_crud
from models.ledger_account import AccountType

TENANT = "society-1"
HEADERS = {"X-Tenant-ID": TENANT, "X-User-ID": "secretary"}


def _make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN on its own; take over so SAVEPOINTs behave
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture()
def engine():
    engine = _make_engine()
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    """Provide a session on a fresh in-memory database for each test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_ledger(db):
    def _make(name, account_type, opening_balance="0.00", side=None, tenant_id=TENANT, parent_group=None):
        return ledger_crud.create_ledger(
            db, tenant_id, name, account_type,
            opening_balance=Decimal(opening_balance),
            opening_balance_side=side,
            parent_group=parent_group,
        )
    return _make


@pytest.fixture()
def cash(make_ledger):
    return make_ledger("Cash", AccountType.CASH)


@pytest.fixture()
def sales(make_ledger):
    return make_ledger("Sales A/c", AccountType.SALES)


@pytest.fixture()
def voucher_date():
    return date(2024, 4, 1)
