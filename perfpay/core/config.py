import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class AuthSettings(BaseModel):
    secret_key: str = Field(default=os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD"))
    algorithm: str = Field(default=os.getenv("JWT_ALGORITHM", "HS256"))
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

class Config(BaseModel):
    app_name: str = "PerfPay Performance & Compensation"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./perfpay.db")

    # Auth
    auth: AuthSettings = AuthSettings()

    # Scoring & compensation policy
    # Optional JSON file holding a custom bonus tier table; the built-in curve is used otherwise.
    tier_policy_path: Optional[str] = os.getenv("TIER_POLICY_PATH") or None
    default_currency: str = os.getenv("DEFAULT_CURRENCY", "INR")
    history_window: int = int(os.getenv("HISTORY_WINDOW", "6"))

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100

    # Seed a default company, admin and parameter set on first start
    bootstrap_defaults: bool = os.getenv("BOOTSTRAP_DEFAULTS", "false").lower() == "true"
    bootstrap_company: str = os.getenv("BOOTSTRAP_COMPANY", "Default Company")
    bootstrap_admin_email: str = os.getenv("BOOTSTRAP_ADMIN_EMAIL", "admin@perfpay.local")
    bootstrap_admin_password: Optional[str] = os.getenv("BOOTSTRAP_ADMIN_PASSWORD") or None

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.auth.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.auth.secret_key:
    _logger.warning("Using insecure default SECRET_KEY, only acceptable in development.")
