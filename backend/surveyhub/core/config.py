from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # App
    APP_NAME: str = "SurveyHub API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql://survey_user:survey_pass@db:5432/survey_db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a pooled connection

    # Catalog limits
    FREE_TEXT_MAX_LENGTH: int = 2000
    CHOICE_TEXT_MAX_LENGTH: int = 500

    # Submissions: extra attempts after a constraint race or store timeout
    SUBMISSION_RETRY_ATTEMPTS: int = 1

    # CORS (comma separated)
    ALLOWED_ORIGINS: str = "http://localhost:3000"
    FRONTEND_URL: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        origins = [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]
        if self.FRONTEND_URL and self.FRONTEND_URL not in origins:
            origins.append(self.FRONTEND_URL)
        return origins


settings = Settings()
