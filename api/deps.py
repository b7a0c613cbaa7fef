from typing import Optional, Tuple

from fastapi import HTTPException

from api.db import SessionLocal
from core import dates
from core.config import get_settings
from core.report import RESOURCES


def get_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def parse_period(year: Optional[int], month: Optional[int]) -> Tuple[int, Optional[str]]:
    if month is not None and not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="month must be between 1 and 12")
    year = year or dates.today(get_settings().time_zone).year
    return year, dates.month_name(month) if month else None


def parse_resource(resource: Optional[str]) -> Optional[str]:
    if resource is None:
        return None
    for known in RESOURCES:
        if known.lower() == resource.strip().lower():
            return known
    raise HTTPException(status_code=400, detail=f"Unsupported resource: {resource}")
