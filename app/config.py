# app/config.py — settings from env vars / .env

import os
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # SQLite database file backing every submission table
    database_path: str = os.path.join(os.getcwd(), "store", "intake.db")
    pool_size: int = 5
    pool_timeout: float = 30.0

    # Uploaded assets
    upload_dir: str = os.path.join(os.getcwd(), "uploads")
    upload_url_prefix: str = "/uploads"

    # errors.log lives here
    store_dir: str = os.path.join(os.getcwd(), "store")
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Razorpay
    razorpay_key_id: str | None = None
    razorpay_key_secret: str | None = None
    razorpay_api_url: str = "https://api.razorpay.com/v1"
    payment_currency: str = "INR"
    payment_timeout_seconds: float = 15.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("upload_url_prefix")
    @classmethod
    def _validate_url_prefix(cls, value: str) -> str:
        cleaned = "/" + value.strip().strip("/")
        if cleaned == "/":
            raise ValueError("UPLOAD_URL_PREFIX must name a path below /")
        return cleaned

    @field_validator("pool_size")
    @classmethod
    def _validate_pool_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("POOL_SIZE must be at least 1")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
