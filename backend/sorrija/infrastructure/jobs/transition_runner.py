"""
RUNNER DE TRANSIÇÕES AUTOMÁTICAS
================================

Ponto único de entrada para rodar as transições de uma organização,
seja pelo scheduler ou pelo endpoint sob demanda.

PROTEÇÕES (por organização, compartilhadas no processo):
- Reentrância: se já há uma rodada em andamento → "Already running"
- Cooldown: se a última rodada COMEÇOU há menos de 30s → "Global cooldown active"

Nenhuma exceção escapa de run(): todo caminho termina num TransitionResult.
"""

import logging
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from sorrija.config import get_settings
from sorrija.infrastructure.jobs.lead_transition_service import (
    TransitionReport,
    run_organization_transitions,
)
from sorrija.infrastructure.services.lead_transition_store import (
    LeadTransitionStore,
    SqlAlchemyLeadTransitionStore,
)
from sorrija.infrastructure.services.notification_service import notify_transition_summary

logger = logging.getLogger(__name__)

ALREADY_RUNNING = "Already running"
COOLDOWN_ACTIVE = "Global cooldown active"

Notifier = Callable[[int, TransitionReport], Awaitable[None]]


@dataclass
class TransitionResult:
    success: bool
    transitions_made: Optional[int] = None
    substatuses_cleared: Optional[int] = None
    substatuses_updated: Optional[int] = None
    failed_leads: Optional[int] = None
    stale_leads: Optional[int] = None
    timestamp: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False

    def to_dict(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class OrganizationRunState:
    is_running: bool = False
    last_started_clock: Optional[float] = None
    last_run_started_at: Optional[datetime] = None
    last_run_at: Optional[datetime] = None
    last_result: Optional[TransitionResult] = None


class LeadTransitionRunner:
    """
    Guarda o estado Idle/Running e o cooldown de cada organização.

    O clock é injetável para testes (padrão: time.monotonic).
    """

    def __init__(
        self,
        store: LeadTransitionStore,
        cooldown_seconds: float = 30,
        verbose: bool = False,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.cooldown_seconds = cooldown_seconds
        self.verbose = verbose
        self.notifier = notifier
        self._clock = clock
        self._lock = threading.Lock()
        self._states: dict[int, OrganizationRunState] = {}

    def _state(self, organization_id: int) -> OrganizationRunState:
        return self._states.setdefault(organization_id, OrganizationRunState())

    def _try_claim(self, organization_id: int) -> Optional[str]:
        """Verifica e reserva a rodada. Retorna o motivo da recusa, se houver."""
        with self._lock:
            state = self._state(organization_id)

            if state.is_running:
                return ALREADY_RUNNING

            started = self._clock()
            if (
                state.last_started_clock is not None
                and started - state.last_started_clock < self.cooldown_seconds
            ):
                return COOLDOWN_ACTIVE

            state.is_running = True
            state.last_started_clock = started
            state.last_run_started_at = datetime.now(timezone.utc)
            return None

    def is_running(self, organization_id: int) -> bool:
        with self._lock:
            return self._state(organization_id).is_running

    async def run(
        self,
        organization_id: int,
        verbose: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> TransitionResult:
        refusal = self._try_claim(organization_id)
        if refusal is not None:
            logger.debug(f"⏭️ Transições da organização {organization_id} ignoradas: {refusal}")
            return TransitionResult(success=False, error=refusal, skipped=True)

        state = self._state(organization_id)
        logger.info(f"🔄 Rodando transições automáticas (organização {organization_id})...")

        try:
            report = await run_organization_transitions(self.store, organization_id, now)
            result = TransitionResult(
                success=True,
                transitions_made=report.transitions_made,
                substatuses_cleared=report.substatuses_cleared,
                substatuses_updated=report.substatuses_updated,
                failed_leads=len(report.errors),
                stale_leads=report.leads_skipped,
                timestamp=datetime.now(timezone.utc).isoformat(),
            )
        except Exception as e:
            logger.error(f"❌ Erro nas transições da organização {organization_id}: {e}", exc_info=True)
            report = None
            result = TransitionResult(success=False, error=str(e) or e.__class__.__name__)
        finally:
            with self._lock:
                state.is_running = False
                state.last_run_at = datetime.now(timezone.utc)

        state.last_result = result

        if result.success:
            logger.info(
                f"✅ Transições concluídas (organização {organization_id}): "
                f"{result.transitions_made} movidos, {result.substatuses_cleared} substatus limpos"
            )
            should_notify = self.verbose if verbose is None else verbose
            if should_notify and report is not None and report.has_changes:
                await self._notify(organization_id, report)

        return result

    async def _notify(self, organization_id: int, report: TransitionReport) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier(organization_id, report)
        except Exception as e:
            logger.warning(f"⚠️ Falha ao criar notificação de transições: {e}")

    def status(self, organization_id: int) -> dict:
        with self._lock:
            state = self._state(organization_id)
            return {
                "is_running": state.is_running,
                "last_run_started_at": state.last_run_started_at,
                "last_run_at": state.last_run_at,
                "last_result": state.last_result.to_dict() if state.last_result else None,
                "cooldown_seconds": self.cooldown_seconds,
            }


# =============================================================================
# INSTÂNCIA DO PROCESSO
# =============================================================================

_runner: Optional[LeadTransitionRunner] = None
_runner_lock = threading.Lock()


def _panel_notifier(session_factory) -> Notifier:
    async def notify(organization_id: int, report: TransitionReport) -> None:
        await notify_transition_summary(
            session_factory,
            organization_id,
            report.transitions_made,
            report.substatuses_cleared,
            report.substatuses_updated,
        )

    return notify


def get_transition_runner() -> LeadTransitionRunner:
    """Runner único do processo (scheduler e API usam o mesmo)."""
    global _runner

    with _runner_lock:
        if _runner is None:
            from sorrija.infrastructure.database import async_session

            settings = get_settings()
            _runner = LeadTransitionRunner(
                store=SqlAlchemyLeadTransitionStore(
                    async_session,
                    batch_size=settings.auto_transitions_batch_size,
                ),
                cooldown_seconds=settings.auto_transitions_cooldown_seconds,
                verbose=settings.auto_transitions_verbose,
                notifier=_panel_notifier(async_session),
            )
        return _runner


def reset_transition_runner() -> None:
    global _runner
    with _runner_lock:
        _runner = None
