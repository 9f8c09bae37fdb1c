"""
TemperatureTransitionRule - Regras customizadas de transição
=============================================================

Lista ordenada por prioridade (menor primeiro). Quando uma regra ativa
casa com o lead, ela vence as regras padrão das configurações do CRM.
"""
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .enums import TriggerEvent

if TYPE_CHECKING:
    from .models import Organization


class TemperatureTransitionRule(Base, TimestampMixin):
    """Condição (evento + origem + timer) e ação (temperatura/substatus)."""

    __tablename__ = "temperature_transition_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=0, index=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Condição (nulo = qualquer)
    trigger_event: Mapped[str] = mapped_column(
        String(30), default=TriggerEvent.INACTIVITY_TIMER.value, nullable=False
    )
    from_temperature: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    from_substatus: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    timer_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Ação
    action_set_temperature: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    action_set_substatus: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    action_clear_substatus: Mapped[bool] = mapped_column(Boolean, default=False)

    organization: Mapped["Organization"] = relationship(back_populates="temperature_rules")

    def __repr__(self) -> str:
        return f"<TemperatureTransitionRule(id={self.id}, priority={self.priority}, name={self.name!r})>"
