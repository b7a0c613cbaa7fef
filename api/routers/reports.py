from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api import crud
from api.deps import get_session, parse_period, parse_resource
from api.models import BillingReport
from api.schemas import GroupedCostResponse, ReportRead, TotalCostResponse

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/reports", response_model=List[ReportRead])
def list_reports(
    year: Optional[int] = None,
    month: Optional[int] = None,
    resource: Optional[str] = None,
    limit: int = Query(default=100, le=1000),
    offset: int = 0,
    session: Session = Depends(get_session),
):
    year, month_name = parse_period(year, month)
    rows = crud.get_reports(session, year, month_name, parse_resource(resource), limit=limit, offset=offset)
    return [ReportRead.model_validate(row) for row in rows]


@router.get("/reports/total", response_model=TotalCostResponse)
def total_cost(
    year: Optional[int] = None,
    month: Optional[int] = None,
    resource: Optional[str] = None,
    session: Session = Depends(get_session),
):
    year, month_name = parse_period(year, month)
    resource = parse_resource(resource)
    total = crud.get_total_cost(session, year, month_name, resource)
    return TotalCostResponse(year=year, month=month_name, resource=resource, total_cost=total)


def _grouped(session: Session, group_by, year, month, resource, limit, offset) -> List[GroupedCostResponse]:
    year, month_name = parse_period(year, month)
    rows = crud.get_grouped_cost(
        session,
        group_by,
        year,
        month_name,
        parse_resource(resource),
        limit=limit,
        offset=offset,
    )
    return [GroupedCostResponse(key=row[0] or "", total_cost=row[1] or 0.0, usage_quantity=row[2] or 0.0) for row in rows]


@router.get("/reports/by-resource", response_model=List[GroupedCostResponse])
def by_resource(
    year: Optional[int] = None,
    month: Optional[int] = None,
    session: Session = Depends(get_session),
):
    return _grouped(session, BillingReport.resource, year, month, None, None, None)


@router.get("/reports/by-service", response_model=List[GroupedCostResponse])
def by_service(
    year: Optional[int] = None,
    month: Optional[int] = None,
    resource: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    return _grouped(session, BillingReport.service_type, year, month, resource, limit, offset)


@router.get("/reports/by-account", response_model=List[GroupedCostResponse])
def by_account(
    year: Optional[int] = None,
    month: Optional[int] = None,
    resource: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    return _grouped(session, BillingReport.account_number, year, month, resource, limit, offset)
