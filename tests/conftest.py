import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from perfpay.database import Base, get_db
from perfpay.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PASSWORD = "AdminPassword123!"
STAFF_PASSWORD = "StaffPassword123!"


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh schema per test. Services commit and roll back on their own, so an
    outer transaction cannot be used to undo their work.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


def _make_company(db, name):
    from perfpay.models.company import Company
    company = Company(name=name, slug=name.lower().replace(" ", "-"))
    db.add(company)
    db.commit()
    return company


def _make_user(db, company, email, role, password, first_name):
    from perfpay.models.user import User
    from perfpay.core.security import get_password_hash

    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        first_name=first_name,
        last_name="Tester",
        employee_code=f"EMP-{first_name.upper()}",
        role=role,
        company_id=company.id,
        is_active=True,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def company(db_session):
    return _make_company(db_session, "Alpha Corp")


@pytest.fixture(scope="function")
def other_company(db_session):
    return _make_company(db_session, "Beta Corp")


@pytest.fixture(scope="function")
def admin_user(db_session, company):
    from perfpay.models.user import UserRole
    return _make_user(db_session, company, "admin@alphacorp.com", UserRole.ADMIN, ADMIN_PASSWORD, "Ada")


@pytest.fixture(scope="function")
def reviewer_user(db_session, company):
    from perfpay.models.user import UserRole
    return _make_user(db_session, company, "reviewer@alphacorp.com", UserRole.REVIEWER, STAFF_PASSWORD, "Rita")


@pytest.fixture(scope="function")
def staff_user(db_session, company):
    from perfpay.models.user import UserRole
    return _make_user(db_session, company, "staff@alphacorp.com", UserRole.STAFF, STAFF_PASSWORD, "Sam")


@pytest.fixture(scope="function")
def second_staff_user(db_session, company):
    from perfpay.models.user import UserRole
    return _make_user(db_session, company, "staff2@alphacorp.com", UserRole.STAFF, STAFF_PASSWORD, "Tom")


@pytest.fixture(scope="function")
def outsider_user(db_session, other_company):
    from perfpay.models.user import UserRole
    return _make_user(db_session, other_company, "staff@betacorp.com", UserRole.STAFF, STAFF_PASSWORD, "Olga")


@pytest.fixture(scope="function")
def make_parameter(db_session, company):
    """Factory for scoring parameters of the default company."""
    from perfpay.models.performance import ScoreParameter

    def _make(name, weight, metric_key=None, sort_order=0, target_company=None):
        parameter = ScoreParameter(
            company_id=(target_company or company).id,
            name=name,
            weight=weight,
            metric_key=metric_key,
            sort_order=sort_order,
        )
        db_session.add(parameter)
        db_session.commit()
        return parameter
    return _make


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens carrying the user's company."""
    from perfpay.core.security import create_access_token

    def _get_token(user, org_id=None):
        return create_access_token(data={
            "sub": user.email,
            "role": user.role.value,
            "user_id": user.id,
            "org_id": org_id if org_id is not None else user.company_id,
        })
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
