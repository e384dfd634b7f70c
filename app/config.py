"""Application Configuration"""

from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.enums import ActiveCoursePolicy, UpcomingCoursePolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Course Dashboard Backend"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Record store (Living Apps REST API)
    LIVING_APPS_BASE_URL: str = "https://my.living-apps.de/rest"
    LIVING_APPS_API_KEY: str = ""
    INSTRUCTORS_APP_ID: str = ""
    PARTICIPANTS_APP_ID: str = ""
    ROOMS_APP_ID: str = ""
    COURSES_APP_ID: str = ""
    ENROLLMENTS_APP_ID: str = ""
    DATA_SOURCE_TIMEOUT_SECONDS: float = 10.0
    REFRESH_TIMEOUT_SECONDS: float = 30.0

    # Dashboard statistics
    ACTIVE_COURSE_POLICY: ActiveCoursePolicy = ActiveCoursePolicy.STATUS
    UPCOMING_COURSE_POLICY: UpcomingCoursePolicy = UpcomingCoursePolicy.INCLUSIVE
    STATUS_LABEL_LOCALE: str = "en"

    # CORS (5173 = Vite default dev server)
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001,http://localhost:5173"
    ALLOWED_METHODS: str = "GET,POST,OPTIONS"
    ALLOWED_HEADERS: str = "*"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list"""
        return [origin.strip() for origin in v.split(",")]

    @field_validator("ALLOWED_METHODS")
    @classmethod
    def parse_methods(cls, v: str) -> List[str]:
        """Parse comma-separated methods into a list"""
        return [method.strip() for method in v.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def rate_limit(self) -> str:
        """slowapi limit string for refresh requests"""
        return f"{self.RATE_LIMIT_PER_MINUTE}/minute"


# Global settings instance
settings = Settings()
