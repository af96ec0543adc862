from __future__ import annotations

from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List

class Settings(BaseSettings):
    env: str = "dev"
    database_url: str = "sqlite+aiosqlite:///./newsboard.db"

    jwt_secret: str
    jwt_issuer: str = "newsboard"
    access_token_minutes: int = 60 * 24

    # Rotating this invalidates every vote token already rendered.
    vote_token_passphrase: str

    default_gravity: float = 1.5
    page_size: int = 30

    cors_origins: str = "http://localhost:5173"
    log_level: str = "INFO"
    vote_rate_limit: str = "60/minute"

    @field_validator("default_gravity")
    @classmethod
    def _non_negative_gravity(cls, v: float) -> float:
        return max(0.0, v)

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
