"""
SCHEMAS DE VALIDAÇÃO
=====================

Define a estrutura de dados de entrada e saída da API.
Pydantic valida automaticamente os dados.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


# ============================================
# TRANSIÇÕES AUTOMÁTICAS
# ============================================

class TransitionRunRequest(BaseModel):
    """Execução sob demanda (painel)."""

    verbose: Optional[bool] = Field(None, description="Cria notificação no painel se algo mudar")


class TransitionRunResponse(BaseModel):
    success: bool
    transitions_made: Optional[int] = None
    substatuses_cleared: Optional[int] = None
    substatuses_updated: Optional[int] = None
    failed_leads: Optional[int] = None
    stale_leads: Optional[int] = None
    timestamp: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False


class TransitionStatusResponse(BaseModel):
    is_running: bool
    last_run_started_at: Optional[datetime] = None
    last_run_at: Optional[datetime] = None
    last_result: Optional[TransitionRunResponse] = None
    cooldown_seconds: float


# ============================================
# CONFIGURAÇÕES DO CRM
# ============================================

class CRMSettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: int
    new_to_cold_minutes: int
    hot_to_cold_days: int
    hot_to_cold_hours: int
    enable_auto_temperature: bool
    awaiting_response_minutes: int
    enable_auto_substatus: bool
    em_conversa_timeout_minutes: int
    enable_substatus_timeout: bool
    aguardando_to_cold_hours: int
    max_follow_up_attempts: int
    default_follow_up_interval: int
    enable_cold_lead_alerts: bool


class CRMSettingsUpdate(BaseModel):
    """Atualização parcial: só os campos enviados são alterados."""

    model_config = ConfigDict(extra="forbid")

    new_to_cold_minutes: Optional[int] = None
    hot_to_cold_days: Optional[int] = None
    hot_to_cold_hours: Optional[int] = None
    enable_auto_temperature: Optional[bool] = None
    awaiting_response_minutes: Optional[int] = None
    enable_auto_substatus: Optional[bool] = None
    em_conversa_timeout_minutes: Optional[int] = None
    enable_substatus_timeout: Optional[bool] = None
    aguardando_to_cold_hours: Optional[int] = None
    max_follow_up_attempts: Optional[int] = None
    default_follow_up_interval: Optional[int] = None
    enable_cold_lead_alerts: Optional[bool] = None


# ============================================
# REGRAS DE TRANSIÇÃO
# ============================================

class TemperatureRuleBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    trigger_event: str = Field(..., description="inactivity_timer, substatus_timeout ou no_response")
    timer_minutes: int = Field(..., ge=1)
    from_temperature: Optional[str] = None
    from_substatus: Optional[str] = None
    action_set_temperature: Optional[str] = None
    action_set_substatus: Optional[str] = None
    action_clear_substatus: bool = False


class TemperatureRuleCreate(TemperatureRuleBase):
    priority: Optional[int] = Field(None, description="Sem prioridade = fim da lista")
    active: bool = True


class TemperatureRuleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    priority: Optional[int] = None
    active: Optional[bool] = None
    trigger_event: Optional[str] = None
    from_temperature: Optional[str] = None
    from_substatus: Optional[str] = None
    timer_minutes: Optional[int] = Field(None, ge=1)
    action_set_temperature: Optional[str] = None
    action_set_substatus: Optional[str] = None
    action_clear_substatus: Optional[bool] = None


class TemperatureRuleResponse(TemperatureRuleBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    priority: int
    active: bool


class RuleReorderRequest(BaseModel):
    rule_ids: list[int] = Field(..., description="Ids na nova ordem (primeiro = maior prioridade)")


class RuleTestRequest(BaseModel):
    """Condições simuladas para o testador de regra."""

    temperature: str
    substatus: Optional[str] = None
    minutes_since_interaction: int = Field(..., ge=0)


class RuleCheckResponse(BaseModel):
    condition: str
    passed: bool
    expected: str
    actual: str


class RuleTestResponse(BaseModel):
    matches: bool
    checks: list[RuleCheckResponse]
    next_temperature: Optional[str] = None
    next_hot_substatus: Optional[str] = None


# ============================================
# LEAD
# ============================================

class LeadTemperatureUpdate(BaseModel):
    temperature: str
    hot_substatus: Optional[str] = None
    lost_reason: Optional[str] = None


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    name: Optional[str] = None
    phone: Optional[str] = None
    temperature: str
    hot_substatus: Optional[str] = None
    lost_reason: Optional[str] = None
    last_interaction_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
