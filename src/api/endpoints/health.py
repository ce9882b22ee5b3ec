from datetime import datetime, timezone
from typing import Dict, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.engine import Engine

from ..dependencies import get_engine, get_orchestrator
from ...core.database import verify_connection
from ...exceptions import UpstreamUnavailable
from ...news.services.ingestion_service import IngestionOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def liveness() -> str:
    return "API working"


@router.get("/health")
async def health_check(
    engine: Engine = Depends(get_engine),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    try:
        verify_connection(engine)
    except UpstreamUnavailable as e:
        logger.error("Database health check failed", error=str(e))
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "database": "unhealthy",
                "error": "Database connectivity failed",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )

    return {
        "status": "healthy",
        "service": "Tech News & Tips API",
        "version": "1.0.0",
        "database": "healthy",
        "ingestion": orchestrator.state.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
