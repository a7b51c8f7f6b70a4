from typing import List

from fastapi import APIRouter, Header, HTTPException, Query, Request

from sitescore.core.engine import ScanOrchestrator
from sitescore.core.errors import PersistenceError, ScanValidationError
from sitescore.models.schemas import ScanReport, ScanRequest, ScanStats

router = APIRouter(prefix="/scan", tags=["scan"])


def _orchestrator(request: Request) -> ScanOrchestrator:
    return request.app.state.orchestrator


@router.post("", response_model=ScanReport)
async def start_scan(body: ScanRequest, request: Request,
                     user_id: str = Header(..., alias="X-User-Id")):
    try:
        return await _orchestrator(request).run_scan(user_id, body.url)
    except ScanValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/history", response_model=List[ScanReport])
async def scan_history(request: Request,
                       limit: int = Query(10, ge=1, le=100),
                       user_id: str = Header(..., alias="X-User-Id")):
    return await _orchestrator(request).history(user_id, limit)


@router.get("/stats", response_model=ScanStats)
async def scan_stats(request: Request, user_id: str = Header(..., alias="X-User-Id")):
    return await _orchestrator(request).stats(user_id)
