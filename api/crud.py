from typing import Iterable, List, Optional, Set, Tuple

import structlog
from sqlalchemy import and_, func, or_, select
from sqlalchemy.engine import Result
from sqlalchemy.orm import Session

from api.models import BillingReport
from core.report import Report

logger = structlog.get_logger()

GROUPING_COLUMNS = (
    BillingReport.account_number,
    BillingReport.account_name,
    BillingReport.service_type,
    BillingReport.day,
    BillingReport.month,
    BillingReport.year,
    BillingReport.region,
    BillingReport.unit_of_measure,
    BillingReport.resource,
)


def _exists(session: Session, report: Report) -> bool:
    stmt = select(BillingReport.id).where(
        or_(
            BillingReport.id == report.id,
            and_(*(column == value for column, value in zip(GROUPING_COLUMNS, report.grouping_key()))),
        )
    )
    return session.execute(stmt.limit(1)).first() is not None


def save_reports(session: Session, reports: Iterable[Report]) -> int:
    """
    Insert reports, skipping any already stored under the same id or charge.

    Returns the number of rows inserted.
    """
    reports = list(reports)
    if not reports:
        raise ValueError("No reports to save")

    seen_ids: Set[str] = set()
    seen_keys: Set[Tuple] = set()
    inserted = 0
    for report in reports:
        key = report.grouping_key()
        if report.id in seen_ids or key in seen_keys or _exists(session, report):
            logger.debug("report_already_saved", report_id=report.id, resource=report.resource)
            continue
        seen_ids.add(report.id)
        seen_keys.add(key)
        session.add(BillingReport(**report.to_dict()))
        inserted += 1
    session.commit()
    logger.info("reports_saved", inserted=inserted, skipped=len(reports) - inserted)
    return inserted


def _period_filter(stmt, year: int, month: Optional[str], resource: Optional[str]):
    stmt = stmt.where(BillingReport.year == year)
    if month:
        stmt = stmt.where(BillingReport.month == month)
    if resource:
        stmt = stmt.where(BillingReport.resource == resource)
    return stmt


def get_total_cost(session: Session, year: int, month: Optional[str] = None, resource: Optional[str] = None) -> float:
    stmt = _period_filter(select(func.sum(BillingReport.cost)), year, month, resource)
    return session.execute(stmt).scalar() or 0.0


def get_grouped_cost(
    session: Session,
    group_by,
    year: int,
    month: Optional[str] = None,
    resource: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> List[Tuple[str, float, float]]:
    stmt = select(group_by, func.sum(BillingReport.cost), func.sum(BillingReport.usage_quantity))
    stmt = _period_filter(stmt, year, month, resource)
    stmt = stmt.group_by(group_by).order_by(func.sum(BillingReport.cost).desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    if offset is not None:
        stmt = stmt.offset(offset)
    result: Result = session.execute(stmt)
    return result.all()


def get_reports(
    session: Session,
    year: int,
    month: Optional[str] = None,
    resource: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[BillingReport]:
    stmt = _period_filter(select(BillingReport), year, month, resource)
    stmt = stmt.order_by(BillingReport.resource, BillingReport.day, BillingReport.account_number)
    return session.execute(stmt.limit(limit).offset(offset)).scalars().all()
