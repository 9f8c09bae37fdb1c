"""Rotas da API."""

from .lead_transitions import router as lead_transitions_router
from .crm_settings import router as crm_settings_router
from .temperature_rules import router as temperature_rules_router
from .leads import router as leads_router
from .health import router as health_router
from .admin_scheduler import router as admin_scheduler_router

__all__ = [
    "lead_transitions_router",
    "crm_settings_router",
    "temperature_rules_router",
    "leads_router",
    "health_router",
    "admin_scheduler_router",
]
