"""Service configuration."""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_list(raw: Optional[str]) -> List[str]:
    """Parse a comma-separated string into a list of trimmed entries."""
    if not raw or not raw.strip():
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class AllowlistSettings(BaseSettings):
    """Settings for the allowlisted file server and its admin endpoints."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    # App
    debug: bool = Field(default=False, alias="IPACL_DEBUG")
    host: str = Field(default="127.0.0.1", alias="IPACL_HOST")
    port: int = Field(default=8080, alias="IPACL_PORT")
    files_root: str = Field(default="files/", alias="IPACL_FILES_ROOT")

    # Allowlist seeds (comma-separated)
    allowed_ips_raw: str = Field(default="127.0.0.1", alias="IPACL_ALLOWED_IPS")
    allowed_networks_raw: str = Field(default="", alias="IPACL_ALLOWED_NETWORKS")
    admin_ips_raw: str = Field(default="127.0.0.1,::1", alias="IPACL_ADMIN_IPS")

    # Line-form file loaded into the file allowlist at startup
    allowlist_file: Optional[str] = Field(default=None, alias="IPACL_ALLOWLIST_FILE")

    # Use stubs that permit everything instead of real allowlists
    stub_enforcement: bool = Field(default=False, alias="IPACL_STUB_ENFORCEMENT")

    # Honor X-Forwarded-For (only behind a trusted proxy)
    trust_forwarded_for: bool = Field(default=False, alias="IPACL_TRUST_FORWARDED_FOR")

    # Logging
    log_level: str = Field(default="INFO", alias="IPACL_LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="IPACL_LOG_FILE")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v):
        """Only accept standard logging level names."""
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of {sorted(_LOG_LEVELS)}, got: {v}")
        return level

    @property
    def allowed_ips(self) -> List[str]:
        return parse_list(self.allowed_ips_raw)

    @property
    def allowed_networks(self) -> List[str]:
        return parse_list(self.allowed_networks_raw)

    @property
    def admin_ips(self) -> List[str]:
        return parse_list(self.admin_ips_raw)


@lru_cache()
def get_settings() -> AllowlistSettings:
    """Get cached settings."""
    return AllowlistSettings()
