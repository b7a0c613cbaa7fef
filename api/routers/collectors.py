import time
import uuid
from typing import Dict, List

import structlog
from fastapi import APIRouter, BackgroundTasks, HTTPException, Query

from collectors.run_all import COLLECTORS, run_collectors

logger = structlog.get_logger()

router = APIRouter(prefix="/collectors", tags=["collectors"])

RUNS: Dict[str, dict] = {}


def _run_job(run_id: str, providers: List[str]):
    status = RUNS[run_id]
    status["state"] = "running"
    status["started_at"] = time.time()
    try:
        status["inserted"] = run_collectors(selected_providers=providers, status=status)
        failed = [name for name, source in status["sources"].items() if source["state"] == "error"]
        if not failed:
            status["state"] = "success"
        elif len(failed) < len(providers):
            status["state"] = "partial"
        else:
            status["state"] = "error"
    except Exception as exc:
        logger.exception("collection_run_failed", run_id=run_id)
        status["state"] = "error"
        status["error"] = str(exc)
    finally:
        status["finished_at"] = time.time()


@router.post("/run")
def run_collection(
    background: BackgroundTasks,
    providers: List[str] = Query(default_factory=lambda: list(COLLECTORS)),
):
    selected = []
    for provider in providers:
        for item in provider.split(","):
            cleaned = item.strip().lower()
            if cleaned and cleaned not in selected:
                selected.append(cleaned)
    if not selected:
        raise HTTPException(status_code=400, detail="No providers specified.")
    invalid = [provider for provider in selected if provider not in COLLECTORS]
    if invalid:
        raise HTTPException(status_code=400, detail=f"Unsupported providers: {', '.join(invalid)}")
    run_id = str(uuid.uuid4())
    RUNS[run_id] = {
        "id": run_id,
        "state": "queued",
        "providers": selected,
        "sources": {provider: {"state": "pending", "entries": 0, "error": None} for provider in selected},
        "inserted": 0,
        "error": None,
        "created_at": time.time(),
        "started_at": None,
        "finished_at": None,
    }
    background.add_task(_run_job, run_id, selected)
    return {"run_id": run_id, "state": "queued"}


@router.get("/status/{run_id}")
def collection_status(run_id: str):
    status = RUNS.get(run_id)
    if not status:
        raise HTTPException(status_code=404, detail="Run not found.")
    return status
