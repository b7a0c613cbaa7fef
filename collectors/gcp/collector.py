import json
from datetime import date, tzinfo
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud import storage
from google.oauth2 import service_account

from collectors.common import load_sample_export
from collectors.gcp.normalizer import GCPNormalizer
from collectors.gcp.usage import GCPUsage, read_daily_usage, stamp_date
from core import dates
from core.config import Settings, get_settings
from core.consolidation import consolidate_reports
from core.errors import ConfigurationError, EmptyResultError, ParseError, RequestError
from core.log import get_logger
from core.report import GCP, Report

SAMPLE_PATH = Path(__file__).with_name("sample.csv")
STORAGE_SCOPES = ["https://www.googleapis.com/auth/devstorage.read_only"]

DailyExport = Tuple[date, bytes]


def _build_storage_client(credentials_json: str) -> storage.Client:
    try:
        info = json.loads(credentials_json)
    except ValueError as exc:
        raise ConfigurationError("GCP_CREDENTIALS_JSON is not valid JSON", provider=GCP) from exc
    credentials = service_account.Credentials.from_service_account_info(info, scopes=STORAGE_SCOPES)
    return storage.Client(project=info.get("project_id"), credentials=credentials)


def daily_billing_file_name(prefix: str, day: date) -> str:
    return f"{prefix}-{day.year}-{dates.pad(day.month)}-{dates.pad(day.day)}.csv"


def fetch_daily_exports(bucket, prefix: str, location: tzinfo, log) -> List[DailyExport]:
    """
    Download every daily export of the current billing month.

    The month is the one containing yesterday; yesterday's own file is not
    requested because the provider publishes it late. A missing day is
    logged and skipped.
    """
    year, month, day = dates.yesterdays_date(location)
    exports: List[DailyExport] = []
    for index in range(1, day):
        fetched = date(year, month, index)
        name = daily_billing_file_name(prefix, fetched)
        try:
            data = bucket.blob(name).download_as_bytes()
        except NotFound:
            log.warning("daily_usage_missing", day=index, month=dates.month_name(month), object=name)
            continue
        except GoogleAPIError as exc:
            log.warning("daily_usage_unavailable", day=index, month=dates.month_name(month), error=str(exc))
            continue
        exports.append((fetched, data))
    return exports


def normalized_usage(daily_exports: Sequence[DailyExport], row_length: int, log, location: tzinfo) -> List[Report]:
    """
    Normalize a month of daily exports into consolidated reports.

    Each day is parsed on its own; an unreadable day is logged and skipped.
    A month in which no day yields a row raises EmptyResultError.
    """
    monthly: List[GCPUsage] = []
    for fetched, data in daily_exports:
        try:
            daily = read_daily_usage(data, row_length)
        except ParseError as exc:
            log.error(
                "daily_usage_unparseable",
                day=fetched.day,
                month=dates.month_name(fetched.month),
                error=exc.message,
            )
            continue
        monthly.extend(stamp_date(daily, fetched))

    if not monthly:
        raise EmptyResultError("parsing GCP usage produced no records", provider=GCP)

    reports = GCPNormalizer(log, location).normalize(monthly)
    return consolidate_reports(reports)


def _collect_from_api(settings: Settings, log, bucket=None) -> List[Report]:
    if bucket is None:
        if not (settings.gcp_credentials_json and settings.gcp_bucket_name):
            raise ConfigurationError("GCP_CREDENTIALS_JSON and GCP_BUCKET_NAME must be set", provider=GCP)
        try:
            client = _build_storage_client(settings.gcp_credentials_json)
            bucket = client.bucket(settings.gcp_bucket_name)
        except GoogleAPIError as exc:
            raise RequestError(str(exc), provider=GCP) from exc

    location = settings.time_zone
    log.info("fetching_daily_usage", bucket=settings.gcp_bucket_name, prefix=settings.gcp_file_prefix)
    exports = fetch_daily_exports(bucket, settings.gcp_file_prefix, location, log)
    return normalized_usage(exports, settings.gcp_row_length, log, location)


def collect(settings: Optional[Settings] = None, bucket=None) -> List[Report]:
    """Return consolidated GCP reports for the current month."""
    settings = settings or get_settings()
    log = get_logger(GCP)
    if settings.gcp_use_sample:
        exports = [(dates.yesterday(settings.time_zone), load_sample_export(SAMPLE_PATH))]
        return normalized_usage(exports, settings.gcp_row_length, log, settings.time_zone)

    if not settings.gcp_bucket_name and bucket is None:
        log.info("gcp_not_configured")
        return []

    return _collect_from_api(settings, log, bucket)
