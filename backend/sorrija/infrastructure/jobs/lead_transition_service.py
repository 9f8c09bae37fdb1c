"""
SERVIÇO DE TRANSIÇÕES AUTOMÁTICAS DE LEADS
===========================================

Executa uma rodada completa de transições para uma organização:

1. Lê configurações, regras ativas e leads (tudo antes de gravar)
2. Resolve a transição de cada lead com o mesmo "agora"
3. Grava só os leads que mudam, um a um

FALHAS:
- Erro na leitura: aborta a rodada inteira, nada é gravado
- Erro ao gravar um lead: registrado, os demais seguem normalmente
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sorrija.domain.services.temperature_rules import (
    LOST,
    LeadSnapshot,
    TransitionDecision,
    build_rule_chain,
    resolve_batch,
)
from sorrija.infrastructure.services.lead_transition_store import LeadTransitionStore

logger = logging.getLogger(__name__)


@dataclass
class LeadWriteError:
    lead_id: int
    error: str


@dataclass
class TransitionReport:
    """Contagens de uma rodada (só gravações bem-sucedidas contam)."""

    leads_evaluated: int = 0
    transitions_made: int = 0
    substatuses_cleared: int = 0
    substatuses_updated: int = 0
    lost_reasons_cleared: int = 0
    leads_skipped: int = 0
    errors: list[LeadWriteError] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.transitions_made
            or self.substatuses_cleared
            or self.substatuses_updated
            or self.lost_reasons_cleared
        )


def build_lead_changes(decision: TransitionDecision, now: datetime) -> dict[str, Any]:
    """Monta o UPDATE mínimo para a decisão."""
    changes: dict[str, Any] = {
        "hot_substatus": decision.next_hot_substatus,
        "updated_at": now,
    }
    if decision.temperature_changed:
        changes["temperature"] = decision.next_temperature
    if decision.next_temperature != LOST:
        changes["lost_reason"] = None
    return changes


async def apply_transitions(
    store: LeadTransitionStore,
    organization_id: int,
    resolved: Iterable[tuple[LeadSnapshot, Optional[TransitionDecision]]],
    now: datetime,
) -> TransitionReport:
    """
    Grava as decisões do motor.

    Leads sem decisão não são tocados (nem updated_at), o que mantém
    a rodada idempotente. Leads alterados por outra via depois da
    leitura são pulados e ficam para a próxima rodada.
    """
    report = TransitionReport()

    for lead, decision in resolved:
        report.leads_evaluated += 1
        if decision is None:
            continue

        try:
            written = await store.update_lead(organization_id, lead, build_lead_changes(decision, now))
        except Exception as e:
            logger.error(f"❌ Erro ao atualizar lead {lead.id}: {e}")
            report.errors.append(LeadWriteError(lead_id=lead.id, error=str(e)))
            continue

        if not written:
            report.leads_skipped += 1
            continue

        if decision.temperature_changed:
            report.transitions_made += 1
            logger.info(
                f"🌡️ Lead {lead.id}: {decision.previous_temperature} → {decision.next_temperature} "
                f"({decision.reason})"
            )
        elif decision.substatus_changed and decision.next_hot_substatus is None:
            report.substatuses_cleared += 1
            logger.info(f"🧹 Lead {lead.id}: substatus {decision.previous_substatus} limpo ({decision.reason})")
        elif decision.substatus_changed:
            report.substatuses_updated += 1
            logger.info(
                f"🔁 Lead {lead.id}: substatus {decision.previous_substatus} → "
                f"{decision.next_hot_substatus} ({decision.reason})"
            )
        else:
            report.lost_reasons_cleared += 1
            logger.info(f"🧹 Lead {lead.id}: motivo de perda limpo ({decision.reason})")

    return report


async def run_organization_transitions(
    store: LeadTransitionStore,
    organization_id: int,
    now: Optional[datetime] = None,
) -> TransitionReport:
    """
    Rodada completa para uma organização.

    Exceções de leitura sobem para quem chamou (o runner transforma
    em resultado com success=False).
    """
    now = now or datetime.now(timezone.utc)

    settings = await store.get_settings(organization_id)
    custom_rules = await store.get_active_rules(organization_id)
    leads = await store.get_leads(organization_id)

    rules = build_rule_chain(settings, custom_rules)
    logger.debug(
        f"📋 Organização {organization_id}: {len(leads)} leads, "
        f"{len(rules)} regras ({len(custom_rules)} customizadas)"
    )

    report = await apply_transitions(store, organization_id, resolve_batch(leads, rules, now), now)

    if report.errors:
        logger.warning(
            f"⚠️ Organização {organization_id}: {len(report.errors)} leads não puderam ser atualizados"
        )

    return report
