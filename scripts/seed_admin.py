import argparse
import getpass

from perfpay.core.security import get_password_hash
from perfpay.database import SessionLocal, init_db
from perfpay.models.company import Company
from perfpay.models.user import User, UserRole
from perfpay.services.parameter_service import seed_default_parameters


def seed(company_name: str, email: str, password: str):
    init_db()
    db = SessionLocal()
    try:
        # 1. Ensure the company exists
        slug = company_name.lower().replace(" ", "-")
        company = db.query(Company).filter(Company.slug == slug).first()
        if not company:
            company = Company(name=company_name, slug=slug)
            db.add(company)
            db.commit()
            db.refresh(company)
            print(f"Created company: {company.name}")

        # 2. Create the admin or reset its password
        admin = db.query(User).filter(User.email == email).first()
        if not admin:
            admin = User(
                email=email,
                hashed_password=get_password_hash(password),
                first_name="Admin",
                role=UserRole.ADMIN,
                company_id=company.id,
                is_active=True
            )
            db.add(admin)
            db.commit()
            print(f"Admin user {email} created")
        else:
            admin.hashed_password = get_password_hash(password)
            db.commit()
            print(f"Admin user {email} already exists. Password reset")

        # 3. Default scoring parameters
        created = seed_default_parameters(db, company.id)
        print(f"Seeded {created} scoring parameters")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a company admin and default parameters")
    parser.add_argument("--company", default="Default Company")
    parser.add_argument("--email", default="admin@perfpay.local")
    args = parser.parse_args()
    seed(args.company, args.email, getpass.getpass("Admin password: "))
