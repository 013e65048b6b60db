from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    DATABASE_URL: str = Field(..., description="Database connection string")
    SECRET_KEY: str = Field(default="your-secret-key-change-this-in-production", description="JWT secret key")
    ALGORITHM: str = Field(default="HS256", description="Algorithm for JWT (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 30, description="How long (in minutes) a session token is valid (default 30 days)")
    AUTHORIZED_EMAILS: str = Field(default="", description="Comma-separated emails allowed to sign in; empty means use the authorized_users table")

    ACCESS_REQUEST_RATE_LIMIT: int = Field(default=10, ge=1, description="Maximum access requests per requester within the rate window")
    ACCESS_REQUEST_RATE_WINDOW_MINUTES: int = Field(default=60, ge=1, description="Trailing window (in minutes) used for rate limiting")
    ACCESS_REQUEST_MESSAGE_MAX_LENGTH: int = Field(default=500, ge=1, description="Maximum length of the optional request message")

    LOG_LEVEL: str = Field(default="INFO", description="Root log level")
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost:5173", description="Comma-separated allowed CORS origins")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def authorized_emails(self) -> List[str]:
        return [e.strip().lower() for e in self.AUTHORIZED_EMAILS.split(",") if e.strip()]

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
