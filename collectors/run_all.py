import argparse
from typing import Callable, Dict, Iterable, List, Optional

import structlog

from api.crud import save_reports
from api.db import SessionLocal
from collectors.aws.collector import collect as collect_aws
from collectors.azure.collector import collect as collect_azure
from collectors.gcp.collector import collect as collect_gcp
from core.config import get_settings
from core.errors import BillingError
from core.log import configure_logging
from core.report import Report

logger = structlog.get_logger()

COLLECTORS: Dict[str, Callable[[], List[Report]]] = {
    "aws": collect_aws,
    "azure": collect_azure,
    "gcp": collect_gcp,
}


def collect_reports(selected_providers: Optional[Iterable[str]] = None, status: Optional[dict] = None) -> List[Report]:
    """
    Run each selected provider and gather its reports.

    A failing provider is recorded in ``status`` and logged; the remaining
    providers still run.
    """
    providers = set(selected_providers or COLLECTORS)
    reports: List[Report] = []
    for name, collector in COLLECTORS.items():
        if name not in providers:
            continue
        if status is not None:
            status["sources"][name] = {"state": "running", "entries": 0, "error": None}
        try:
            collected = collector()
        except BillingError as exc:
            logger.error("collector_failed", provider=exc.provider or name, code=exc.code, error=exc.message)
            if status is not None:
                status["sources"][name] = {"state": "error", "entries": 0, "error": str(exc)}
            continue
        except Exception as exc:
            logger.exception("collector_crashed", provider=name)
            if status is not None:
                status["sources"][name] = {"state": "error", "entries": 0, "error": str(exc)}
            continue
        reports.extend(collected)
        logger.info("collector_finished", provider=name, reports=len(collected))
        if status is not None:
            status["sources"][name] = {"state": "success", "entries": len(collected), "error": None}
    return reports


def run_collectors(selected_providers: Optional[Iterable[str]] = None, status: Optional[dict] = None) -> int:
    reports = collect_reports(selected_providers, status)
    if not reports:
        logger.warning("no_reports_collected")
        return 0
    session = SessionLocal()
    try:
        return save_reports(session, reports)
    finally:
        session.close()


def parse_providers(value: str) -> List[str]:
    providers = [item.strip().lower() for item in value.split(",") if item.strip()]
    invalid = [item for item in providers if item not in COLLECTORS]
    if invalid:
        raise argparse.ArgumentTypeError(f"unsupported providers: {', '.join(invalid)}")
    return providers


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Collect and store monthly IaaS billing reports.")
    parser.add_argument(
        "--providers",
        type=parse_providers,
        default=list(COLLECTORS),
        help="comma separated subset of aws,azure,gcp",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    inserted = run_collectors(args.providers)
    logger.info("run_finished", inserted=inserted)


if __name__ == "__main__":
    main()
