from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App settings
    PROJECT_NAME: str = "PennyWise Backend"
    API_PREFIX: str = "/api/v1"
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_ENDPOINT_URL: Optional[str] = None  # e.g. http://localhost:8000 for DynamoDB Local
    DYNAMO_USERS_TABLE: str = Field(default="pennywise-users")
    DYNAMO_EXPENSES_TABLE: str = Field(default="pennywise-expenses")
    DYNAMO_INSIGHTS_TABLE: str = Field(default="pennywise-insights")

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(default="change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # Gemini
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL_NAME: str = "gemini-1.5-flash"

    # Insights
    AI_ANALYSIS_LIMIT: int = 100

    @property
    def expose_error_details(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT == "development"


settings = Settings()
