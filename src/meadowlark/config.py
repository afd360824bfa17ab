"""Application settings loaded from the environment (and ``.env``)."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Process-wide configuration.

    ``env`` (``APP_ENV``) selects logging verbosity, the database and
    whether test mode is available. Only ``development`` and
    ``production`` are recognised; anything else is rejected when the
    application is built.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    env: str = Field(default="development", validation_alias="APP_ENV")
    host: str = "0.0.0.0"
    port: int = 3000
    base_url: str = "https://localhost:3000"
    log_level: str = "INFO"

    cookie_secret: str = "your cookie secret goes here"

    mongo_development_url: str = "mongodb://localhost:27017/meadowlark_dev"
    mongo_production_url: str = "mongodb://localhost:27017/meadowlark"

    ssl_key_file: Path = Path("ssl/app.pem")
    ssl_cert_file: Path = Path("ssl/app.crt")

    views_dir: Path = PACKAGE_DIR / "views"
    public_dir: Path = PACKAGE_DIR / "public"
    log_dir: Path = Path("log")
    static_base_url: str = ""

    # provider name -> {"authorize_url": ..., "client_id": ...}
    auth_providers: dict[str, dict[str, str]] = Field(default_factory=dict)

    @property
    def is_production(self) -> bool:
        return self.env == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
