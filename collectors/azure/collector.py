from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from collectors.azure.normalizer import AzureNormalizer
from collectors.azure.usage import read_usage
from collectors.common import load_sample_export
from core import dates
from core.config import Settings, get_settings
from core.consolidation import consolidate_reports
from core.errors import ConfigurationError, ParseError, RequestError, ResponseError
from core.log import get_logger
from core.report import AZURE, Report

SAMPLE_PATH = Path(__file__).with_name("sample.csv")


def _build_http_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(total=3, backoff_factor=0.6, status_forcelist=[429, 500, 502, 503, 504])
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    return session


class EnrollmentClient:
    """Reads usage reports from the Azure enterprise enrollment REST API."""

    def __init__(self, base_url: str, access_key: str, enrollment: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.access_key = access_key
        self.enrollment = enrollment
        self.session = session or _build_http_session()

    @property
    def headers(self) -> Dict[str, str]:
        return {"authorization": f"bearer {self.access_key}", "api-version": "1.0"}

    def _get(self, url: str) -> requests.Response:
        try:
            response = self.session.get(url, headers=self.headers, timeout=60)
        except requests.RequestException as exc:
            raise RequestError(str(exc), provider=AZURE, details={"url": url}) from exc
        if response.status_code != 200:
            raise ResponseError(f"{response.status_code} {response.reason}", provider=AZURE, details={"url": url})
        return response

    def usage_reports(self) -> Dict[str, Any]:
        response = self._get(f"{self.base_url}/rest/{self.enrollment}/usage-reports")
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError("usage report listing is not valid JSON", provider=AZURE) from exc

    def detail_link(self, month: str) -> str:
        for report in self.usage_reports().get("AvailableMonths", []):
            if report.get("Month") == month:
                link = report.get("LinkToDownloadDetailReport") or ""
                if link.startswith("/"):
                    return f"{self.base_url}{link}"
                return link
        raise ResponseError(f"no usage report available for {month}", provider=AZURE)

    def monthly_usage(self, year: int, month: int) -> bytes:
        link = self.detail_link(f"{year}-{dates.pad(month)}")
        return self._get(link).content


def normalized_usage(data: bytes, log, location: tzinfo) -> List[Report]:
    """Decode, normalize and consolidate one monthly Azure detail report."""
    usages = read_usage(data)
    reports = AzureNormalizer(log, location).normalize(usages)
    return consolidate_reports(reports)


def _collect_from_api(settings: Settings, log, client: Optional[EnrollmentClient] = None) -> List[Report]:
    if client is None:
        if not (settings.azure_access_key and settings.azure_enrollment):
            raise ConfigurationError("AZURE_ACCESS_KEY and AZURE_ENROLLMENT must be set", provider=AZURE)
        client = EnrollmentClient(settings.azure_api_url, settings.azure_access_key, settings.azure_enrollment)

    location = settings.time_zone
    current = dates.now(location)
    log.info("fetching_monthly_usage", enrollment=client.enrollment, year=current.year, month=current.month)
    data = client.monthly_usage(current.year, current.month)
    return normalized_usage(data, log, location)


def collect(settings: Optional[Settings] = None, client: Optional[EnrollmentClient] = None) -> List[Report]:
    """Return consolidated Azure reports for the current month."""
    settings = settings or get_settings()
    log = get_logger(AZURE)
    if settings.azure_use_sample:
        return normalized_usage(load_sample_export(SAMPLE_PATH), log, settings.time_zone)

    if not settings.azure_enrollment and client is None:
        log.info("azure_not_configured")
        return []

    return _collect_from_api(settings, log, client)
