from .schemas import (
    TransitionRunRequest,
    TransitionRunResponse,
    TransitionStatusResponse,
    CRMSettingsResponse,
    CRMSettingsUpdate,
    TemperatureRuleCreate,
    TemperatureRuleUpdate,
    TemperatureRuleResponse,
    RuleReorderRequest,
    RuleTestRequest,
    RuleTestResponse,
    LeadTemperatureUpdate,
    LeadResponse,
)

__all__ = [
    "TransitionRunRequest",
    "TransitionRunResponse",
    "TransitionStatusResponse",
    "CRMSettingsResponse",
    "CRMSettingsUpdate",
    "TemperatureRuleCreate",
    "TemperatureRuleUpdate",
    "TemperatureRuleResponse",
    "RuleReorderRequest",
    "RuleTestRequest",
    "RuleTestResponse",
    "LeadTemperatureUpdate",
    "LeadResponse",
]
