"""
HEALTH CHECK
============
Liveness da API, conexão com o banco e estado do scheduler.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from sorrija.infrastructure.database import get_db
from sorrija.infrastructure.scheduler import get_scheduler_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Retorna 200 se tudo OK, 503 se o banco não responder.

    O scheduler parado não derruba o health (pode estar desligado por config).
    """
    status = "healthy"
    checks = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error(f"❌ Health check: banco indisponível: {e}")
        checks["database"] = f"error: {str(e)}"
        status = "unhealthy"

    checks["scheduler"] = get_scheduler_status()

    body = {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
    return JSONResponse(status_code=200 if status == "healthy" else 503, content=body)
