"""Shared fixtures: in-memory SQLite database and a TestClient bound to it."""

import os
import tempfile

# Settings are read at import time, so point them at test resources first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="site_erp_uploads_")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import site_erp.models  # noqa: F401
from site_erp.core.database import Base
from site_erp.core.dependencies import get_db
from site_erp.main import app
from site_erp.models import Ledger, LedgerType, MaterialSupplierLedger, Site

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_site(db):
    def _make(site_id="S1", site_name="Ring Road Package 1", **kwargs):
        site = Site(id=site_id, site_name=site_name, **kwargs)
        db.add(site)
        db.commit()
        return site

    return _make


@pytest.fixture
def make_supplier(db):
    def _make(name="Shree Cement Traders", ledger_id=None):
        extra = {"id": ledger_id} if ledger_id else {}
        ledger = Ledger(name=name, ledger_type=LedgerType.MATERIAL_SUPPLIER, **extra)
        db.add(ledger)
        db.commit()
        return ledger

    return _make


@pytest.fixture
def make_material_row(db):
    def _make(ledger, site_id="S1", material="Cement", qty="10", rate="350",
              total_amt=None, entry_date=datetime(2024, 3, 1)):
        row = MaterialSupplierLedger(
            ledger_id=ledger.id,
            site_id=site_id,
            entry_date=entry_date,
            material=material,
            qty=Decimal(qty),
            rate=Decimal(rate),
            total_amt=Decimal(total_amt) if total_amt is not None else None,
        )
        db.add(row)
        db.commit()
        return row

    return _make
