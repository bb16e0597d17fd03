from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Vapi Settings
    VAPI_API_KEY: str = ""
    VAPI_BASE_URL: str = "https://api.vapi.ai"
    VAPI_ASSISTANT_ID: str = ""
    VAPI_SHARE_KEY: str = ""
    VAPI_TIMEOUT_SECONDS: float = 10.0
    VAPI_LIST_LIMIT: int = 100

    # Shared secret Vapi sends in X-Vapi-Secret (unset = not enforced)
    VAPI_WEBHOOK_SECRET: Optional[str] = None

    # Listing Settings
    PROBE_BEFORE_LISTING: bool = True
    ENABLE_FALLBACK_REPORTS: bool = True

    @field_validator("*", mode="before")
    @classmethod
    def strip_quotes(cls, value):
        """Env files sometimes carry quoted values ("...")"""
        if isinstance(value, str) and len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            return value[1:-1]
        return value

    class Config:
        env_file = ".env"


settings = Settings()
