"""
Configuration and settings for the gateway.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    service_name: str = Field(default="Women Empowerment Super App Lite API")
    environment: str = Field(default="development")
    port: int = Field(default=3001)
    log_level: str = Field(default="INFO")

    # Single origin allowed by CORS (the React client)
    client_url: str = Field(default="http://localhost:5173")

    # Database (Supabase Postgres)
    database_url: Optional[str] = Field(default=None)

    # Firebase Admin service account
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_private_key_id: Optional[str] = Field(default=None)
    firebase_private_key: Optional[str] = Field(default=None)
    firebase_client_email: Optional[str] = Field(default=None)
    firebase_client_id: Optional[str] = Field(default=None)
    firebase_check_revoked: bool = Field(default=False)

    # Supabase Storage through its S3-compatible endpoint
    storage_endpoint: Optional[str] = Field(default=None)
    storage_region: Optional[str] = Field(default=None)
    storage_bucket: str = Field(default="documents")
    storage_access_key_id: Optional[str] = Field(default=None)
    storage_secret_access_key: Optional[str] = Field(default=None)

    # Rate limiting (fixed window per client)
    redis_url: Optional[str] = Field(default=None)
    rate_limit_window_seconds: int = Field(default=15 * 60, ge=1)
    rate_limit_max_requests: int = Field(default=100, ge=1)
    rate_limit_key_prefix: str = Field(default="gateway:ratelimit:")
    trust_forwarded_for: bool = Field(default=False)

    # Gamification
    vault_document_points: int = Field(default=10)
    journal_points: int = Field(default=5)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @field_validator("firebase_private_key")
    @classmethod
    def _unescape_private_key(cls, value: Optional[str]) -> Optional[str]:
        # Keys pasted into env files usually carry literal "\n" sequences.
        if value:
            return value.replace("\\n", "\n")
        return value

    @property
    def has_firebase_service_account(self) -> bool:
        return bool(self.firebase_private_key and self.firebase_client_email)

    @property
    def has_object_storage(self) -> bool:
        return bool(self.storage_endpoint and self.storage_access_key_id)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
