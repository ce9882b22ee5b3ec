import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies import get_cancellation_token, get_orchestrator, get_scheduler
from src.core.scheduler import CancellationToken, Scheduler
from src.news.schemas.responses import RefreshResponse
from src.news.services.ingestion_service import IngestionOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/refresh", response_model=RefreshResponse)
async def refresh_data(
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
    scheduler: Scheduler = Depends(get_scheduler),
    token: CancellationToken = Depends(get_cancellation_token),
):
    """
    Run an ingestion pass now and wait for it to finish.
    May overlap with a scheduled run; both write through the same upsert path.
    """
    try:
        report = await scheduler.trigger_now(lambda: orchestrator.run(trigger="on_demand"), token, name="ingestion")
    except Exception as e:
        logger.error("Error refreshing data", error=str(e), exc_info=e)
        return JSONResponse(status_code=500, content={"message": "Error refreshing data"})

    if report is None:
        return JSONResponse(status_code=503, content={"message": "Service is shutting down"})

    return RefreshResponse(message="Data refresh completed", report=report.to_dict())
