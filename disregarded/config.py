"""
Application configuration.

Loads settings from environment variables (and an optional .env file).
The resulting object is frozen: build it once at startup and pass it
to the services that need it.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )
    
    # ==========================================================================
    # Environment
    # ==========================================================================
    
    environment: str = "development"
    log_level: str = "INFO"
    
    # ==========================================================================
    # API Server
    # ==========================================================================
    
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = "http://localhost:3000"
    
    # ==========================================================================
    # Database
    # ==========================================================================
    
    database_path: str = "disregarded.db"
    
    # ==========================================================================
    # Authentication
    # ==========================================================================
    
    # No default: the process must not start without a signing secret
    jwt_secret: str = Field(min_length=1)
    jwt_expiry: int = Field(default=86400, gt=0)  # seconds
    
    registration_enabled: bool = True
    
    # Argon2id cost parameters (memory in KiB)
    argon2_memory_cost: int = 65536
    argon2_time_cost: int = 2
    argon2_parallelism: int = 1
    
    # ==========================================================================
    # Essays
    # ==========================================================================
    
    max_essay_length: int = Field(default=500_000, gt=0)
    essay_id_length: int = Field(default=5, gt=0)
    essay_id_max_attempts: int = Field(default=100, gt=0)
    
    # ==========================================================================
    # Optional Services
    # ==========================================================================
    
    sentry_dsn: str = ""
    
    # ==========================================================================
    # Helpers
    # ==========================================================================
    
    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
    
    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
