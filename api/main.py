from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import collectors, reports
from core.config import get_settings
from core.log import configure_logging

settings = get_settings()
configure_logging(settings.log_level, settings.log_json)

app = FastAPI(title="IaaS Billing")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports.router)
app.include_router(collectors.router)
