from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from collectors.common import csv_field, decode_csv, map_rows, record_hash, split_header
from core.cleaner import RowCleaner
from core.errors import ParseError
from core.report import GCP

DAILY_ROW_LENGTH = 18
COMPACT_ROW_LENGTH = 14


@dataclass
class GCPUsage:
    account_id: str = csv_field("Account ID")
    line_item: str = csv_field("Line Item")
    start_time: str = csv_field("Start Time")
    end_time: str = csv_field("End Time")
    project: str = csv_field("Project")
    measurement1: str = csv_field("Measurement1")
    measurement1_total_consumption: str = csv_field("Measurement1 Total Consumption")
    measurement1_units: str = csv_field("Measurement1 Units")
    # credit and label columns only appear in the 18 column export
    credit1: str = csv_field("Credit1", optional=True)
    credit1_amount: str = csv_field("Credit1 Amount", optional=True)
    credit1_currency: str = csv_field("Credit1 Currency", optional=True)
    cost: str = csv_field("Cost")
    currency: str = csv_field("Currency")
    project_number: str = csv_field("Project Number")
    project_id: str = csv_field("Project ID")
    project_name: str = csv_field("Project Name")
    project_labels: str = csv_field("Project Labels", optional=True)
    description: str = csv_field("Description")
    time_fetched: Optional[date] = field(default=None)

    def hash(self, region: str) -> str:
        return record_hash(self, region)


def read_daily_usage(data: bytes, row_length: int = DAILY_ROW_LENGTH) -> List[GCPUsage]:
    """Decode one day's billing export; raises ParseError when it is unreadable."""
    cleaner = RowCleaner(row_length)
    rows = cleaner.remove_empty_rows(decode_csv(data, GCP))
    if not rows:
        return []
    header, body = split_header(rows, "Account ID", GCP)
    if len(header) != row_length:
        raise ParseError(f"header has {len(header)} columns, expected {row_length}", provider=GCP)
    body = cleaner.remove_short_and_truncate_long_rows(body)
    return [GCPUsage(**values) for values in map_rows(header, body, GCPUsage, GCP)]


def stamp_date(usages: List[GCPUsage], fetched: date) -> List[GCPUsage]:
    for usage in usages:
        usage.time_fetched = fetched
    return usages
