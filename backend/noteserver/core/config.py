from __future__ import annotations

from typing import List

from pydantic import AnyUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    # Core
    PORT: int = 8000
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str = "sqlite:///./noteserver.db"

    # A fronting proxy terminates TLS, so the scheme used for self-calls
    # cannot be read from the request.
    DISABLE_SSL: bool = False

    # Sessions
    SESSION_SECRET: str = "change-me"
    SESSION_COOKIE: str = "noteserver.sid"
    SESSION_MAX_AGE: int = 14 * 24 * 3600
    SESSION_HTTPS_ONLY: bool = False

    # Static assets, searched in order under STATIC_PREFIX
    STATIC_PREFIX: str = "/static"
    STATIC_DIRS: str = "dist,public"
    FAVICON_PATH: str = "public/img/favicon.ico"

    # GraphQL
    GRAPHQL_TRANSPORT: str = "local"
    GRAPHQL_URL: AnyUrl | str | None = None
    GRAPHQL_TIMEOUT_SECONDS: float = 10.0

    # Auth
    PASSWORD_HASH_ROUNDS: int = 12
    LANDING_PATH: str = "/notes"
    LOGIN_PATH: str = "/login"

    @property
    def is_prod(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def static_dirs(self) -> List[str]:
        if not self.STATIC_DIRS:
            return []
        return [d.strip() for d in self.STATIC_DIRS.split(",") if d.strip()]


settings = Settings()
