import os
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set env vars BEFORE any app imports
_here = Path(__file__).parent
os.environ["DEPRECIATION_CONFIG_PATH"] = str(_here.parent / "config" / "depreciation.yaml")

# Use a temp file-based SQLite so all connections share the same database
_db_file = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_db_file.close()
_TEST_DB_URL = f"sqlite:///{_db_file.name}"
os.environ["DATABASE_URL"] = _TEST_DB_URL

from fixed_assets.db.database import Base, get_db  # noqa: E402
from fixed_assets.main import app  # noqa: E402
from fixed_assets.models.asset import Asset  # noqa: E402

_test_engine = create_engine(_TEST_DB_URL, connect_args={"check_same_thread": False})
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)


@pytest.fixture(autouse=True)
def setup_db():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=_test_engine)
    yield
    Base.metadata.drop_all(bind=_test_engine)


@pytest.fixture
def db():
    session = _TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_asset(db):
    def _make_asset(**overrides):
        data = {
            "tenant_id": "tenant-a",
            "name": "Compresseur",
            "purchase_price": Decimal("12000"),
            "salvage_value": Decimal("0"),
            "useful_life_years": 5,
            "depreciation_method": "straight_line",
            "depreciation_rate": None,
            "in_service_date": date(2025, 1, 1),
            "status": "active",
        }
        data.update(overrides)
        data.setdefault("current_book_value", data["purchase_price"])
        asset = Asset(**data)
        db.add(asset)
        db.commit()
        db.refresh(asset)
        return asset

    return _make_asset
