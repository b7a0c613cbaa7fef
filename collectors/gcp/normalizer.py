from datetime import tzinfo
from typing import Iterable, List, Optional

from collectors.gcp.usage import GCPUsage
from core import dates
from core.fields import parse_float, warn_invalid
from core.report import GCP, Report


class GCPNormalizer:
    def __init__(self, log, location: tzinfo):
        self.log = log
        self.location = location

    def normalize(self, usages: Optional[Iterable[GCPUsage]]) -> List[Report]:
        reports: List[Report] = []
        if not usages:
            return reports

        for usage in usages:
            fetched = usage.time_fetched or dates.today(self.location)
            quantity = parse_float("measurement total consumption", usage.measurement1_total_consumption)
            cost = parse_float("cost", usage.cost)
            warn_invalid(self.log, quantity)
            warn_invalid(self.log, cost)

            reports.append(
                Report(
                    id=usage.hash(""),
                    account_number=usage.project_number or usage.account_id,
                    account_name=usage.project_name or usage.project_id,
                    day=fetched.day,
                    month=dates.month_name(fetched.month),
                    year=fetched.year,
                    service_type=usage.description or usage.line_item,
                    usage_quantity=quantity.value,
                    cost=cost.value,
                    region="",
                    unit_of_measure=usage.measurement1_units,
                    resource=GCP,
                )
            )
        return reports
