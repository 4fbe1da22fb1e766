from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RESIZER_",
        env_file=".env",
        case_sensitive=False,
        frozen=True,
    )

    host: str = Field(
        default="0.0.0.0",
        description="Listen address"
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Listen port"
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Threads available for resize work"
    )
    codec: Literal["opencv", "pillow"] = Field(
        default="opencv",
        description="Image codec backend"
    )
    log_level: str = Field(
        default="info",
        description="Minimum level for emitted log events"
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
