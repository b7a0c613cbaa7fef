from datetime import tzinfo
from typing import Iterable, List, Optional

from collectors.aws.usage import LINKED_LINE_ITEM, AWSUsage
from core import dates
from core.report import AWS, Report


class AWSNormalizer:
    """
    Maps AWS monthly billing rows onto canonical reports.

    Only linked line items describe usage; invoice totals and payer line
    items are export artifacts and are dropped without a warning. The
    export's billing period does not map to a single day, so every report
    is dated yesterday in the configured zone.
    """

    def __init__(self, log, location: tzinfo, availability_zone: str):
        self.log = log
        self.location = location
        self.availability_zone = availability_zone

    def normalize(self, usages: Optional[Iterable[AWSUsage]]) -> List[Report]:
        reports: List[Report] = []
        if not usages:
            return reports

        yesterday = dates.yesterday(self.location)
        current = dates.now(self.location)
        for usage in usages:
            if usage.record_type != LINKED_LINE_ITEM:
                continue
            reports.append(
                Report(
                    id=usage.hash(self.availability_zone),
                    account_number=usage.linked_account_id or usage.payer_account_id,
                    account_name=usage.linked_account_name or usage.payer_account_name,
                    day=yesterday.day,
                    month=dates.month_name(current.month),
                    year=current.year,
                    service_type=usage.product_name,
                    usage_quantity=usage.usage_quantity,
                    cost=usage.total_cost,
                    region=self.availability_zone,
                    unit_of_measure="",
                    resource=AWS,
                )
            )
        self.log.debug("normalized_usage", records=len(reports))
        return reports
