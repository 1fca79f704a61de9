from sqlalchemy.orm import sessionmaker

from perfpay.core import init_system
from perfpay.core.config import settings
from perfpay.core.security import verify_password
from perfpay.models.company import Company
from perfpay.models.performance import ScoreParameter
from perfpay.models.user import User, UserRole
from perfpay.services.parameter_service import DEFAULT_PARAMETERS


def _bootstrap(db_session, monkeypatch, enabled=True, password="Bootstrap123!"):
    monkeypatch.setattr(settings, "bootstrap_defaults", enabled)
    monkeypatch.setattr(settings, "bootstrap_admin_password", password)
    monkeypatch.setattr(init_system, "SessionLocal", sessionmaker(bind=db_session.get_bind()))
    init_system.init_system_data()


def test_bootstrap_creates_company_admin_and_parameters(db_session, monkeypatch):
    _bootstrap(db_session, monkeypatch)

    company = db_session.query(Company).one()
    admin = db_session.query(User).one()
    assert admin.role == UserRole.ADMIN
    assert admin.company_id == company.id
    assert verify_password("Bootstrap123!", admin.hashed_password)
    assert db_session.query(ScoreParameter).count() == len(DEFAULT_PARAMETERS)


def test_bootstrap_is_skipped_when_a_company_exists(db_session, monkeypatch, company):
    _bootstrap(db_session, monkeypatch)
    assert db_session.query(Company).count() == 1
    assert db_session.query(User).count() == 0


def test_bootstrap_disabled_by_default(db_session, monkeypatch):
    _bootstrap(db_session, monkeypatch, enabled=False)
    assert db_session.query(Company).count() == 0


def test_bootstrap_needs_a_password(db_session, monkeypatch):
    _bootstrap(db_session, monkeypatch, password=None)
    assert db_session.query(Company).count() == 0


def test_default_parameter_weights():
    assert [p["weight"] for p in DEFAULT_PARAMETERS] == [15, 10, 10, 5, 15, 20, 10, 10, 5, 10]
    assert len({p["metric_key"] for p in DEFAULT_PARAMETERS}) == len(DEFAULT_PARAMETERS)
