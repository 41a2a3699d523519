from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Staffline"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    log_level: str = "INFO"
    secret_key: str = "change-me"

    jwt_algorithm: str = "HS256"
    access_token_ttl_min: int = 24 * 60

    database_url: str = "sqlite:///./data/staffline.db"
    data_dir: Path = Path("./data")
    upload_dir: Path = Path("./data/uploads")
    invoice_dir: Path = Path("./data/invoices")
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_upload_extensions: str = ".jpeg,.jpg,.png,.pdf"

    default_manager: str = "Manager A"
    bill_number_prefix: str = "BILL"

    admin_username: str = "admin"
    admin_email: str = "admin@staffline.local"
    admin_password: str = "admin123"

    company_name: str = "Staffline Staffing Services"
    company_address: str = "100 Main Street, Springfield, USA"

    cors_origins: str = "http://127.0.0.1:5173,http://localhost:5173"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("access_token_ttl_min", "max_upload_bytes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def upload_extension_set(self) -> set[str]:
        return {ext.strip().lower() for ext in self.allowed_upload_extensions.split(",") if ext.strip()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
