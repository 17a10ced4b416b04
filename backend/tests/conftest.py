from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv
import pytest

# Load environment variables for tests before the app reads its settings
load_dotenv(Path(__file__).resolve().parents[1] / '.env.test')

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from climaquote.models.base import BaseModel  # noqa: E402
from climaquote.schemas import CatalogEntry  # noqa: E402
from climaquote.services.context import QuoteContext  # noqa: E402

TENANT = "clima-bcn"
STAFF_HEADERS = {"X-Tenant-ID": TENANT}


def make_session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    BaseModel.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def db():
    Session = make_session_factory()
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def ctx():
    return QuoteContext.build(TENANT, "es")


@pytest.fixture
def client():
    from climaquote.main import app
    from climaquote.api.dependencies import get_db

    Session = make_session_factory()

    def override_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def split_payload() -> dict:
    """A 3.5 kW split with one kit and two metered extras."""
    return {
        "brand": "Daikin",
        "model": "TXF35",
        "product_type": "air_conditioner",
        "status": "active",
        "stock": 4,
        "description": {"es": "Split de pared inverter", "ca": "Split de paret inverter"},
        "variants": [
            {"label": {"es": "3,5 kW", "ca": "3,5 kW"}, "unit_price": "900"},
            {"label": {"es": "5 kW", "ca": ""}, "unit_price": "1250"},
        ],
        "installation_kits": [
            {"label": "Kit instalación básica", "fixed_price": "150"},
            {"label": "Kit instalación con preinstalación", "fixed_price": "90"},
        ],
        "extras": [
            {"label": "Metro de tubería frigorífica", "unit_price": "10"},
            {"label": "Soporte de pared", "unit_price": "35"},
        ],
    }


@pytest.fixture
def split_entry() -> CatalogEntry:
    return CatalogEntry.model_validate(split_payload())


@pytest.fixture
def expected_total() -> Decimal:
    # 900 + 150 + 2 x 10 + 1 x 35
    return Decimal("1105")
