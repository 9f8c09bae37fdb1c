from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Iterable, Optional, Sequence

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from sorrija.domain.entities import CRMSettings, TemperatureTransitionRule
from sorrija.domain.services.temperature_rules import LeadSnapshot
from sorrija.infrastructure.services.auth_service import create_access_token
from sorrija.infrastructure.services.lead_transition_store import LeadTransitionStore

TEST_DATABASE_URL = "sqlite+aiosqlite://"

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def create_test_engine() -> AsyncEngine:
    """Banco em memória: uma única conexão compartilhada (StaticPool)."""
    return create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def make_override_get_db(session_factory: async_sessionmaker):
    """
    Override da dependência get_db para ser usada nos testes, garantindo
    que a sessão de teste seja usada pela aplicação.
    """
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return override_get_db


def auth_headers(user_id: int) -> dict:
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


def minutes_ago(minutes: float, now: datetime = NOW) -> datetime:
    return now - timedelta(minutes=minutes)


def snapshot(
    lead_id: int = 1,
    temperature: str = "novo",
    hot_substatus: Optional[str] = None,
    minutes_since_interaction: Optional[float] = None,
    minutes_since_created: float = 0,
    now: datetime = NOW,
    lost_reason: Optional[str] = None,
) -> LeadSnapshot:
    return LeadSnapshot(
        id=lead_id,
        temperature=temperature,
        hot_substatus=hot_substatus,
        last_interaction_at=(
            minutes_ago(minutes_since_interaction, now) if minutes_since_interaction is not None else None
        ),
        created_at=minutes_ago(minutes_since_created, now),
        lost_reason=lost_reason,
    )


def make_rule(**overrides) -> TemperatureTransitionRule:
    values = {
        "id": 1,
        "organization_id": 1,
        "name": "Regra de teste",
        "priority": 0,
        "active": True,
        "trigger_event": "inactivity_timer",
        "from_temperature": None,
        "from_substatus": None,
        "timer_minutes": 60,
        "action_set_temperature": None,
        "action_set_substatus": None,
        "action_clear_substatus": False,
    }
    values.update(overrides)
    return TemperatureTransitionRule(**values)


class FakeClock:
    """Relógio monotônico controlado pelo teste."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class InMemoryLeadStore(LeadTransitionStore):
    """Store em memória: registra leituras e gravações para os asserts."""

    def __init__(
        self,
        leads: Iterable[LeadSnapshot] = (),
        settings: Optional[CRMSettings] = None,
        rules: Sequence[TemperatureTransitionRule] = (),
        failing_lead_ids: Iterable[int] = (),
        read_error: Optional[Exception] = None,
    ):
        self.rows: dict[int, dict[str, Any]] = {
            lead.id: {
                "temperature": lead.temperature,
                "hot_substatus": lead.hot_substatus,
                "lost_reason": lead.lost_reason,
                "last_interaction_at": lead.last_interaction_at,
                "created_at": lead.created_at,
                "updated_at": lead.created_at,
            }
            for lead in leads
        }
        self.settings = settings
        self.rules = list(rules)
        self.failing_lead_ids = set(failing_lead_ids)
        self.read_error = read_error
        self.reads = 0
        self.writes: list[tuple[int, dict[str, Any]]] = []

    async def get_settings(self, organization_id: int) -> CRMSettings:
        self.reads += 1
        if self.read_error is not None:
            raise self.read_error
        if self.settings is None:
            self.settings = CRMSettings.with_defaults(organization_id)
        return self.settings

    async def get_active_rules(self, organization_id: int) -> Sequence[TemperatureTransitionRule]:
        self.reads += 1
        return [rule for rule in self.rules if rule.active]

    async def get_leads(self, organization_id: int) -> list[LeadSnapshot]:
        self.reads += 1
        return [
            LeadSnapshot(
                id=lead_id,
                temperature=row["temperature"],
                hot_substatus=row["hot_substatus"],
                last_interaction_at=row["last_interaction_at"],
                created_at=row["created_at"],
                lost_reason=row["lost_reason"],
            )
            for lead_id, row in self.rows.items()
        ]

    async def update_lead(self, organization_id: int, lead: LeadSnapshot, changes: dict[str, Any]) -> bool:
        if lead.id in self.failing_lead_ids:
            raise RuntimeError(f"falha simulada no lead {lead.id}")
        row = self.rows.get(lead.id)
        if row is None or (row["temperature"], row["hot_substatus"]) != (lead.temperature, lead.hot_substatus):
            return False
        self.writes.append((lead.id, changes))
        row.update(changes)
        return True
