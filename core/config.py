import os
from dataclasses import dataclass
from datetime import tzinfo
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from collectors.gcp.usage import COMPACT_ROW_LENGTH, DAILY_ROW_LENGTH
from core.errors import ConfigurationError

GCP_ROW_LENGTHS = (DAILY_ROW_LENGTH, COMPACT_ROW_LENGTH)


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name, default)
    return value.strip() if value else value


def _get_flag(name: str, default: str = "0") -> bool:
    return (_get_env(name, default) or "").lower() in ("1", "true", "yes")


def load_time_zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"unknown time zone '{name}'") from exc


@dataclass(frozen=True)
class Settings:
    time_zone_name: str = "UTC"
    database_url: str = "sqlite:///./billing.db"
    log_level: str = "INFO"
    log_json: bool = False

    aws_region: str = "us-east-1"
    aws_billing_bucket: Optional[str] = None
    aws_account_number: Optional[str] = None
    aws_availability_zone: str = ""
    aws_use_sample: bool = False

    azure_api_url: str = "https://ea.azure.com"
    azure_access_key: Optional[str] = None
    azure_enrollment: Optional[str] = None
    azure_use_sample: bool = False

    gcp_credentials_json: Optional[str] = None
    gcp_bucket_name: Optional[str] = None
    gcp_file_prefix: str = "Billing"
    gcp_row_length: int = 18
    gcp_use_sample: bool = False

    @property
    def time_zone(self) -> tzinfo:
        return load_time_zone(self.time_zone_name)


def load_settings() -> Settings:
    row_length = _get_env("GCP_ROW_LENGTH", "18")
    try:
        gcp_row_length = int(row_length)
    except ValueError as exc:
        raise ConfigurationError(f"GCP_ROW_LENGTH must be an integer, got '{row_length}'") from exc
    if gcp_row_length not in GCP_ROW_LENGTHS:
        raise ConfigurationError(
            f"GCP_ROW_LENGTH must be one of {', '.join(str(item) for item in GCP_ROW_LENGTHS)}",
            provider="GCP",
        )

    settings = Settings(
        time_zone_name=_get_env("TIME_ZONE", "UTC"),
        database_url=_get_env("DATABASE_URL", "sqlite:///./billing.db"),
        log_level=(_get_env("LOG_LEVEL") or "INFO").upper(),
        log_json=_get_flag("LOG_JSON"),
        aws_region=_get_env("AWS_REGION", "us-east-1"),
        aws_billing_bucket=_get_env("AWS_BILLING_BUCKET"),
        aws_account_number=_get_env("AWS_ACCOUNT_NUMBER"),
        aws_availability_zone=_get_env("AWS_AVAILABILITY_ZONE", "") or "",
        aws_use_sample=_get_flag("AWS_USE_SAMPLE"),
        azure_api_url=_get_env("AZURE_API_URL", "https://ea.azure.com"),
        azure_access_key=_get_env("AZURE_ACCESS_KEY"),
        azure_enrollment=_get_env("AZURE_ENROLLMENT"),
        azure_use_sample=_get_flag("AZURE_USE_SAMPLE"),
        gcp_credentials_json=_get_env("GCP_CREDENTIALS_JSON"),
        gcp_bucket_name=_get_env("GCP_BUCKET_NAME"),
        gcp_file_prefix=_get_env("GCP_FILE_PREFIX", "Billing"),
        gcp_row_length=gcp_row_length,
        gcp_use_sample=_get_flag("GCP_USE_SAMPLE"),
    )
    # fail early on a bad zone rather than on first use
    load_time_zone(settings.time_zone_name)
    return settings


@lru_cache
def get_settings() -> Settings:
    return load_settings()
