from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Building Manager API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # When set, access tokens are verified locally instead of via GoTrue
    SUPABASE_JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # -------------------------------------------------
    # Authorization
    # -------------------------------------------------
    # Off = role-name matching only, a binding's building scope is not
    # compared with the target building.
    ENFORCE_TENANT_SCOPE: bool = False

    # -------------------------------------------------
    # Audit ledger
    # -------------------------------------------------
    AUDIT_WRITE_TIMEOUT_SECONDS: float = 5.0

    # -------------------------------------------------
    # Mutations / soft delete
    # -------------------------------------------------
    UPDATE_CONFLICT_RETRIES: int = 3
    SOFT_DELETE_RETENTION_DAYS: int = 90

    # -------------------------------------------------
    # Seeding
    # -------------------------------------------------
    SEED_ADMIN_EMAIL: str = "admin@buildingmanager.com"
    SEED_ADMIN_PASSWORD: Optional[str] = None

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    model_config = SettingsConfigDict(case_sensitive=True)


# Instantiate settings
settings = Settings()
