# app/core/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Savings Ledger API"
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_URL: str
    CREATE_TABLES_ON_STARTUP: bool = True

    # Identity provider session tokens (HS256 shared secret or RS256 PEM public key)
    IDENTITY_JWT_SECRET: str
    IDENTITY_JWT_ALGORITHM: str = "HS256"
    IDENTITY_JWT_ISSUER: str = ""

    # Identity provider user API, used to enrich the profile of first-seen users
    IDENTITY_API_URL: str = ""
    IDENTITY_API_KEY: str = ""
    IDENTITY_API_TIMEOUT: float = 5.0

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    # Optional: Environment
    ENVIRONMENT: str = "development"

    @property
    def is_supabase(self) -> bool:
        """Check if we're using Supabase database"""
        return any(d in self.DATABASE_URL for d in [
            "supabase.co",
            "supabase.com",
            "pooler.supabase",
        ])

    @property
    def is_sqlite(self) -> bool:
        """SQLite (tests, local runs) does not take pool sizing arguments"""
        return self.DATABASE_URL.startswith("sqlite")

# Create a global settings instance
settings = Settings()
