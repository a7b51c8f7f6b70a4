"""FastAPI entry point.

Run with ``uvicorn --factory sitescore.main:create_app``. With no arguments the
factory reads the environment and configures logging; importing this module
has no side effects.
"""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sitescore.api.scans import router as scans_router
from sitescore.core.config import Settings
from sitescore.core.engine import ScanOrchestrator, build_orchestrator
from sitescore.core.log import setup_logging
from sitescore.storage.reports import InMemoryScanReportStore, ScanReportStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None,
               orchestrator: Optional[ScanOrchestrator] = None,
               store: Optional[ScanReportStore] = None) -> FastAPI:
    if settings is None:
        settings = Settings.from_env()
        setup_logging(settings.log_level)
    if not settings.ai_api_key:
        logger.warning("OPENROUTER_API_KEY not set; AI recommendations disabled, using rule-based ones.")
    store = store or InMemoryScanReportStore()

    app = FastAPI(title="SiteScore API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.orchestrator = orchestrator or build_orchestrator(settings, store)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(scans_router)
    return app
