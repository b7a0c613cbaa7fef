from collections import OrderedDict
from dataclasses import replace
from typing import Iterable, List, Tuple

from core.report import Report


def consolidate_reports(reports: Iterable[Report]) -> List[Report]:
    """
    Merge reports describing the same logical charge.

    Providers split one daily charge into several line items; reports that
    share a grouping key are collapsed into the first one seen, with usage
    and cost summed. Output keeps first-occurrence order.
    """
    groups: "OrderedDict[Tuple, Report]" = OrderedDict()
    for report in reports:
        key = report.grouping_key()
        existing = groups.get(key)
        if existing is None:
            groups[key] = report
            continue
        groups[key] = replace(
            existing,
            usage_quantity=existing.usage_quantity + report.usage_quantity,
            cost=existing.cost + report.cost,
        )
    return list(groups.values())
