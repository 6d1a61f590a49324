from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path

# Get absolute path to backend directory (config/settings.py -> backend/)
_backend_dir = Path(__file__).parent.parent
_env_local = _backend_dir / '.env.local'
_env_file = _backend_dir / '.env'

DEVELOPMENT_PROFILES = ("dev", "local")


class Settings(BaseSettings):
    """Application settings"""

    # Active profile - only an explicit "dev"/"local" unlocks development-only endpoints
    APP_ENV: str = "production"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./ember.db"
    TEST_DATABASE_URL: str = ""  # Optional - used by the test suite when set

    # Signing key for OAuth2 state values
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    OAUTH2_STATE_EXPIRE_MINUTES: int = 10

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/login/oauth2/code/google"

    # Front-end page that receives the result of an OAuth2 login
    OAUTH2_AUTHORIZED_REDIRECT_URI: str = "http://localhost:3000/oauth2/redirect"

    # CORS - Will be parsed from environment variable string
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:4200,http://localhost:5173"

    # Access Control - emails granted the ADMIN role (comma-separated)
    ADMIN_EMAILS: str = ""

    # Credential policy
    BCRYPT_ROUNDS: int = 12
    MIN_PASSWORD_LENGTH: int = 6

    class Config:
        # Prioritize .env.local for local development, fallback to .env
        # Use absolute paths to avoid working directory issues
        env_file = str(_env_local) if _env_local.exists() else str(_env_file)
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from environment file

    def get_allowed_origins(self) -> List[str]:
        """Parse and return CORS origins as a list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    def get_admin_emails(self) -> List[str]:
        """Parse and return admin emails as a list"""
        return [email.strip().lower() for email in self.ADMIN_EMAILS.split(",") if email.strip()]

    def is_development(self) -> bool:
        """True when running under a dev/local profile"""
        return self.APP_ENV.strip().lower() in DEVELOPMENT_PROFILES


settings = Settings()
