"""Entidades do domínio."""
from .base import Base, TimestampMixin
from .enums import (
    LeadTemperature,
    HotSubstatus,
    TriggerEvent,
    UserRole,
    TERMINAL_TEMPERATURES,
)
from .models import (
    Organization,
    User,
    Lead,
    Notification,
)
from .crm_settings import CRMSettings, DEFAULT_CRM_SETTINGS
from .temperature_rule import TemperatureTransitionRule

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Enums
    "LeadTemperature",
    "HotSubstatus",
    "TriggerEvent",
    "UserRole",
    "TERMINAL_TEMPERATURES",
    # Models
    "Organization",
    "User",
    "Lead",
    "Notification",
    # CRM
    "CRMSettings",
    "DEFAULT_CRM_SETTINGS",
    "TemperatureTransitionRule",
]
