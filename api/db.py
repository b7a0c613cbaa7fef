from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.config import get_settings


def get_database_url() -> str:
    return get_settings().database_url


def build_engine(database_url: Optional[str] = None):
    database_url = database_url or get_database_url()
    connect_args = {}
    if database_url.startswith("sqlite:"):
        connect_args = {"check_same_thread": False}
    return create_engine(database_url, connect_args=connect_args, future=True)


ENGINE = build_engine()
SessionLocal = sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, future=True)
