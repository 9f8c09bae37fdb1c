"""
MODELOS DO BANCO DE DADOS
=========================

Tabelas centrais do CRM: organização (clínica), usuários,
leads e notificações do painel.
"""
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .enums import LeadTemperature, UserRole

if TYPE_CHECKING:
    from .crm_settings import CRMSettings
    from .temperature_rule import TemperatureTransitionRule


# ============================================
# ORGANIZATION - Clínica cliente
# ============================================

class Organization(Base, TimestampMixin):
    """Clínica (tenant) que usa o CRM."""

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    users: Mapped[list["User"]] = relationship(back_populates="organization", cascade="all, delete-orphan")
    leads: Mapped[list["Lead"]] = relationship(back_populates="organization", cascade="all, delete-orphan")
    notifications: Mapped[list["Notification"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )
    crm_settings: Mapped[Optional["CRMSettings"]] = relationship(
        back_populates="organization", uselist=False, cascade="all, delete-orphan"
    )
    temperature_rules: Mapped[list["TemperatureTransitionRule"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )


# ============================================
# USER - Usuários do painel
# ============================================

class User(Base, TimestampMixin):
    """Usuário que acessa o painel."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.ADMIN.value)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    organization: Mapped["Organization"] = relationship(back_populates="users")


# ============================================
# LEAD - Potencial paciente
# ============================================

class Lead(Base, TimestampMixin):
    """
    Lead do funil comercial.

    INVARIANTES:
    - hot_substatus preenchido se e somente se temperature = quente
    - lost_reason preenchido somente se temperature = perdido
    """

    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), index=True
    )

    # ==========================================
    # DADOS DO LEAD
    # ==========================================
    name: Mapped[Optional[str]] = mapped_column(String(200))
    phone: Mapped[Optional[str]] = mapped_column(String(20), index=True)

    # ==========================================
    # TEMPERATURA E SUBSTATUS
    # ==========================================
    temperature: Mapped[str] = mapped_column(
        String(20), default=LeadTemperature.NEW.value, nullable=False, index=True
    )
    hot_substatus: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    lost_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Última interação (entrada ou saída). Nulo = usa created_at como referência
    last_interaction_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    organization: Mapped["Organization"] = relationship(back_populates="leads")


# ============================================
# NOTIFICATION - Notificações do painel
# ============================================

class Notification(Base):
    """Alertas exibidos no painel da clínica."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(50))
    title: Mapped[str] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(Text)
    reference_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[Optional[int]] = mapped_column(nullable=True)
    read: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    organization: Mapped["Organization"] = relationship(back_populates="notifications")
