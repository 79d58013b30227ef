from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Dict, List


class Settings(BaseSettings):
    """
    Application settings
    Loaded from the environment and the .env file
    """
    # Database
    DATABASE_URL: str = "sqlite:///./mall_admin.db"

    # JWT
    SECRET_KEY: str = "change-me-mall-admin-secret-key-at-least-32-chars"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120  # 2 hours

    # Authorization
    # Permission codes granted per role name when no Role row overrides them
    ROLE_PERMISSIONS: Dict[str, List[str]] = {"admin": ["*"]}
    DEFAULT_PERMISSIONS: List[str] = []

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Mall Admin API"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Username recorded in created_by/updated_by when no user is attached
    DEFAULT_OPERATOR: str = "system"

    # First admin account, created at startup when admin_users is empty
    FIRST_ADMIN_USERNAME: str = "admin"
    FIRST_ADMIN_PASSWORD: str = "admin123"

    # CORS (comma separated string)
    BACKEND_CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from the comma separated string"""
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
