"""
SORRIJA CRM API - Ponto de Entrada
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sorrija.config import get_settings
from sorrija.infrastructure.database import init_db
from sorrija.infrastructure.logging_config import setup_logging
from sorrija.infrastructure.scheduler import create_scheduler, start_scheduler, stop_scheduler

# Routers
from sorrija.api.routes import (
    lead_transitions_router,
    crm_settings_router,
    temperature_rules_router,
    leads_router,
    health_router,
    admin_scheduler_router,
)

settings = get_settings()
logger = logging.getLogger(__name__)


# ============================================================
# 🔁 LIFESPAN
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("🚀 Iniciando Sorrija CRM API...")

    if settings.is_development:
        await init_db()
        logger.info("✅ Tabelas criadas!")

    create_scheduler(settings)
    start_scheduler()

    yield

    stop_scheduler()
    logger.info("👋 Encerrando Sorrija CRM API...")


# ============================================================
# FASTAPI APP
# ============================================================
app = FastAPI(
    title="Sorrija CRM API",
    description="CRM multi-clínica com transições automáticas de leads",
    version="0.1.0",
    lifespan=lifespan,
)

# ============================================================
# ⭐ CORS
# ============================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================
# ROTAS
# ============================================================
app.include_router(lead_transitions_router, prefix="/api/v1")
app.include_router(crm_settings_router, prefix="/api/v1")
app.include_router(temperature_rules_router, prefix="/api/v1")
app.include_router(leads_router, prefix="/api/v1")
app.include_router(admin_scheduler_router, prefix="/api/v1")
app.include_router(health_router)


@app.get("/")
async def root():
    return {"name": "Sorrija CRM API", "status": "running"}
