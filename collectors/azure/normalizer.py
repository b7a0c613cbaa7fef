from datetime import tzinfo
from typing import Iterable, List, Optional

from collectors.azure.usage import AzureUsage
from core import dates
from core.fields import parse_float, parse_int, warn_invalid
from core.report import AZURE, Report


class AzureNormalizer:
    """
    Maps Azure enrollment detail rows onto canonical reports.

    Every numeric and calendar cell arrives as text; each one is validated
    independently and replaced by its neutral value (0.0 or today's date
    part) with a warning when it does not parse.
    """

    def __init__(self, log, location: tzinfo):
        self.log = log
        self.location = location

    def normalize(self, usages: Optional[Iterable[AzureUsage]]) -> List[Report]:
        reports: List[Report] = []
        if not usages:
            return reports

        current = dates.now(self.location)
        for usage in usages:
            quantity = parse_float("consumed quantity", usage.consumed_quantity)
            cost = parse_float("extended cost", usage.extended_cost)
            day = parse_int("day", usage.day, minimum=1, maximum=31)
            month = parse_int("month", usage.month, minimum=1, maximum=12)
            year = parse_int("year", usage.year)
            for result in (quantity, cost, day, month, year):
                warn_invalid(self.log, result)

            reports.append(
                Report(
                    id=usage.hash(usage.meter_region),
                    account_number=usage.subscription_guid,
                    account_name=usage.subscription_name,
                    day=day.or_else(lambda: current.day),
                    month=dates.month_name(month.or_else(lambda: current.month)),
                    year=year.or_else(lambda: current.year),
                    service_type=usage.consumed_service,
                    usage_quantity=quantity.value,
                    cost=cost.value,
                    region=usage.meter_region,
                    unit_of_measure=usage.unit_of_measure,
                    resource=AZURE,
                )
            )
        return reports
