import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.core.deps import get_db
from marketplace.core.security import create_access_token
from marketplace.main import app
from marketplace.models import AdminUser, Base, Category, City, Country, Policy, State
from marketplace.schemas.fees import FeeCreate
from marketplace.services import fees as fees_service
from tests.helpers import fee_payload


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    user = AdminUser(id=str(uuid.uuid4()), username="superadmin", is_active=True)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_headers(admin):
    token = create_access_token(subject=admin.id, extra_claims={"role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def reference_data(db):
    """Menus 7-9, a policy and one country/state/city."""
    db.add_all(
        [
            Category(id=7, name="Store"),
            Category(id=8, name="RFQ"),
            Category(id=9, name="Factories"),
            Policy(id=1, title="Standard marketplace policy"),
            Country(id=1, name="United Arab Emirates"),
            State(id=1, name="Dubai", country_id=1),
            City(id=1, name="Dubai City", state_id=1),
        ]
    )
    db.commit()


@pytest.fixture
def create_fee(db, reference_data):
    """Create a fee tree through the service and return the Fee row."""

    def _create(**kwargs):
        return fees_service.create_fee_tree(db, FeeCreate.model_validate(fee_payload(**kwargs)))

    return _create
