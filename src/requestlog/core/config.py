from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root (3 levels up from this file)
_ENV_FILE = Path(__file__).resolve().parent.parent.parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        extra="ignore",
    )

    # Used verbatim in projects/<project_id>/traces/<token>
    project_id: str = Field(
        "",
        validation_alias=AliasChoices("GOOGLE_CLOUD_PROJECT", "GCP_PROJECT", "PROJECT_ID"),
    )

    # Cloud Functions / Cloud Run put the client address in X-Forwarded-For
    trust_proxy: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
