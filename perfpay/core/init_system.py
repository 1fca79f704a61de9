import logging
import re
from perfpay.core.config import settings
from perfpay.core.security import get_password_hash
from perfpay.database import SessionLocal
from perfpay.models.company import Company
from perfpay.models.user import User, UserRole
from perfpay.services.parameter_service import seed_default_parameters

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def init_system_data():
    """
    First-start bootstrap, enabled with BOOTSTRAP_DEFAULTS=true.
    If no company exists, creates one with an admin user and the default
    scoring parameters.
    """
    if not settings.bootstrap_defaults:
        return
    if not settings.bootstrap_admin_password:
        logger.warning("BOOTSTRAP_DEFAULTS is set but BOOTSTRAP_ADMIN_PASSWORD is not; skipping bootstrap")
        return

    db = SessionLocal()
    try:
        company_count = db.query(Company).count()
        if company_count:
            logger.info(f"System initialization check: {company_count} company(ies) found.")
            return

        logger.info("Running startup initialization...")
        company = Company(name=settings.bootstrap_company, slug=slugify(settings.bootstrap_company))
        db.add(company)
        db.flush()

        db.add(User(
            email=settings.bootstrap_admin_email,
            hashed_password=get_password_hash(settings.bootstrap_admin_password),
            first_name="Admin",
            role=UserRole.ADMIN,
            company_id=company.id,
            is_active=True,
        ))
        db.commit()

        created = seed_default_parameters(db, company.id)
        logger.info(f"Bootstrapped {company.name} with admin {settings.bootstrap_admin_email} and {created} parameters")
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization: {e}", exc_info=True)
        raise
    finally:
        db.close()
