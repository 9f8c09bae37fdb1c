"""
CRMSettings - Configurações do CRM por organização
===================================================

Uma linha por organização. Criada sob demanda com os valores padrão
na primeira leitura; alterada apenas pela tela de configurações.
"""
from typing import TYPE_CHECKING
from sqlalchemy import Boolean, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .models import Organization


DEFAULT_CRM_SETTINGS = {
    # NOVO → FRIO
    "new_to_cold_minutes": 1440,
    # QUENTE → FRIO
    "hot_to_cold_days": 3,
    "hot_to_cold_hours": 0,
    "enable_auto_temperature": True,
    # Substatus do lead quente
    "awaiting_response_minutes": 60,
    "enable_auto_substatus": True,
    "em_conversa_timeout_minutes": 60,
    "enable_substatus_timeout": True,
    "aguardando_to_cold_hours": 48,
    # Follow-up
    "max_follow_up_attempts": 5,
    "default_follow_up_interval": 3,
    # Alertas
    "enable_cold_lead_alerts": True,
}


class CRMSettings(Base, TimestampMixin):
    """Limites e chaves das automações de temperatura de uma organização."""

    __tablename__ = "crm_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), unique=True, index=True
    )

    new_to_cold_minutes: Mapped[int] = mapped_column(Integer, default=DEFAULT_CRM_SETTINGS["new_to_cold_minutes"])
    hot_to_cold_days: Mapped[int] = mapped_column(Integer, default=DEFAULT_CRM_SETTINGS["hot_to_cold_days"])
    hot_to_cold_hours: Mapped[int] = mapped_column(Integer, default=DEFAULT_CRM_SETTINGS["hot_to_cold_hours"])
    enable_auto_temperature: Mapped[bool] = mapped_column(
        Boolean, default=DEFAULT_CRM_SETTINGS["enable_auto_temperature"]
    )

    awaiting_response_minutes: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_CRM_SETTINGS["awaiting_response_minutes"]
    )
    enable_auto_substatus: Mapped[bool] = mapped_column(Boolean, default=DEFAULT_CRM_SETTINGS["enable_auto_substatus"])
    em_conversa_timeout_minutes: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_CRM_SETTINGS["em_conversa_timeout_minutes"]
    )
    enable_substatus_timeout: Mapped[bool] = mapped_column(
        Boolean, default=DEFAULT_CRM_SETTINGS["enable_substatus_timeout"]
    )
    aguardando_to_cold_hours: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_CRM_SETTINGS["aguardando_to_cold_hours"]
    )

    max_follow_up_attempts: Mapped[int] = mapped_column(Integer, default=DEFAULT_CRM_SETTINGS["max_follow_up_attempts"])
    default_follow_up_interval: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_CRM_SETTINGS["default_follow_up_interval"]
    )
    enable_cold_lead_alerts: Mapped[bool] = mapped_column(
        Boolean, default=DEFAULT_CRM_SETTINGS["enable_cold_lead_alerts"]
    )

    organization: Mapped["Organization"] = relationship(back_populates="crm_settings")

    @classmethod
    def with_defaults(cls, organization_id: int, **overrides) -> "CRMSettings":
        """Instancia já com os valores padrão (o default das colunas só vale no INSERT)."""
        values = {**DEFAULT_CRM_SETTINGS, **overrides}
        return cls(organization_id=organization_id, **values)

    def __repr__(self) -> str:
        return f"<CRMSettings(organization_id={self.organization_id})>"
