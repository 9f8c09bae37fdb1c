"""
Testes do store SQLAlchemy e da rodada completa contra o banco (SQLite em memória).
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from sorrija.domain.entities import CRMSettings, Lead, Notification, Organization, TemperatureTransitionRule
from sorrija.infrastructure.jobs.lead_transition_service import run_organization_transitions
from sorrija.infrastructure.jobs.transition_runner import LeadTransitionRunner
from sorrija.infrastructure.services.lead_transition_store import TransitionStoreError
from sorrija.infrastructure.services.notification_service import notify_transition_summary
from tests.utils import NOW, FakeClock, minutes_ago, snapshot


async def add_lead(session, organization_id, temperature="novo", hot_substatus=None,
                   minutes_since_created=0, minutes_since_interaction=None, lost_reason=None):
    created_at = minutes_ago(minutes_since_created)
    lead = Lead(
        organization_id=organization_id,
        name="Paciente",
        phone="5511999990000",
        temperature=temperature,
        hot_substatus=hot_substatus,
        lost_reason=lost_reason,
        last_interaction_at=(
            minutes_ago(minutes_since_interaction) if minutes_since_interaction is not None else None
        ),
        created_at=created_at,
        updated_at=created_at,
    )
    session.add(lead)
    await session.commit()
    return lead


async def load_lead(session_factory, lead_id) -> Lead:
    async with session_factory() as session:
        result = await session.execute(select(Lead).where(Lead.id == lead_id))
        return result.scalar_one()


async def test_settings_are_created_with_defaults_when_missing(sql_store, session_factory, organization):
    settings = await sql_store.get_settings(organization.id)

    assert settings.new_to_cold_minutes == 1440
    assert settings.enable_substatus_timeout is True

    async with session_factory() as session:
        result = await session.execute(
            select(CRMSettings).where(CRMSettings.organization_id == organization.id)
        )
        assert result.scalar_one() is not None


async def test_get_leads_pages_through_all_leads(sql_store, db_session, organization):
    for _ in range(5):
        await add_lead(db_session, organization.id)

    leads = await sql_store.get_leads(organization.id)

    assert len(leads) == 5
    assert [lead.id for lead in leads] == sorted(lead.id for lead in leads)


async def test_get_leads_is_scoped_by_organization(sql_store, db_session, organization):
    other = Organization(name="Outra", slug="outra", active=True)
    db_session.add(other)
    await db_session.commit()
    await add_lead(db_session, organization.id)
    await add_lead(db_session, other.id)

    leads = await sql_store.get_leads(organization.id)

    assert len(leads) == 1


async def test_active_rules_come_ordered_by_priority(sql_store, db_session, organization):
    for name, priority, active in [("B", 2, True), ("A", 1, True), ("Off", 0, False)]:
        db_session.add(TemperatureTransitionRule(
            organization_id=organization.id,
            name=name,
            priority=priority,
            active=active,
            trigger_event="inactivity_timer",
            timer_minutes=60,
            action_set_temperature="frio",
        ))
    await db_session.commit()

    rules = await sql_store.get_active_rules(organization.id)

    assert [rule.name for rule in rules] == ["A", "B"]


async def test_update_missing_lead_is_skipped(sql_store, organization):
    ghost = snapshot(9999, "novo")

    written = await sql_store.update_lead(organization.id, ghost, {"temperature": "frio"})

    assert written is False


async def test_update_failure_is_wrapped(sql_store, db_session, organization):
    lead = await add_lead(db_session, organization.id, "novo")

    with pytest.raises(TransitionStoreError):
        await sql_store.update_lead(organization.id, snapshot(lead.id, "novo"), {"coluna_inexistente": 1})


async def test_update_is_scoped_by_organization(sql_store, session_factory, db_session, organization):
    other = Organization(name="Outra", slug="outra", active=True)
    db_session.add(other)
    await db_session.commit()
    lead = await add_lead(db_session, other.id, "novo")

    written = await sql_store.update_lead(organization.id, snapshot(lead.id, "novo"), {"temperature": "frio"})

    assert written is False
    assert (await load_lead(session_factory, lead.id)).temperature == "novo"


async def test_update_skips_lead_changed_since_read(sql_store, session_factory, db_session, organization):
    lead = await add_lead(db_session, organization.id, "novo", minutes_since_created=2000)
    [read] = await sql_store.get_leads(organization.id)

    lead.temperature = "quente"
    lead.hot_substatus = "em_negociacao"
    await db_session.commit()

    written = await sql_store.update_lead(
        organization.id, read, {"temperature": "frio", "hot_substatus": None, "updated_at": NOW}
    )

    assert written is False
    row = await load_lead(session_factory, lead.id)
    assert row.temperature == "quente"
    assert row.hot_substatus == "em_negociacao"


async def test_get_leads_reads_lost_reason(sql_store, db_session, organization):
    await add_lead(db_session, organization.id, "frio", lost_reason="importado")

    [lead] = await sql_store.get_leads(organization.id)

    assert lead.lost_reason == "importado"


async def test_run_clears_lost_reason_on_cold_lead(sql_store, session_factory, db_session, organization):
    lead = await add_lead(db_session, organization.id, "frio", minutes_since_created=10, lost_reason="importado")

    report = await run_organization_transitions(sql_store, organization.id, now=NOW)

    assert report.lost_reasons_cleared == 1
    row = await load_lead(session_factory, lead.id)
    assert row.lost_reason is None
    assert row.temperature == "frio"


async def test_chained_transition_is_stable_against_database(sql_store, session_factory, db_session, organization):
    lead = await add_lead(db_session, organization.id, "quente", "em_conversa",
                          minutes_since_created=4000, minutes_since_interaction=50 * 60)

    first = await run_organization_transitions(sql_store, organization.id, now=NOW)
    second = await run_organization_transitions(sql_store, organization.id, now=NOW)

    assert first.transitions_made == 1
    assert not second.has_changes
    row = await load_lead(session_factory, lead.id)
    assert row.temperature == "frio"
    assert row.hot_substatus is None


async def test_full_run_against_database(sql_store, session_factory, db_session, organization):
    cold = await add_lead(db_session, organization.id, "novo", minutes_since_created=2 * 24 * 60,
                          lost_reason="dado antigo")
    awaiting = await add_lead(db_session, organization.id, "quente", "em_conversa",
                              minutes_since_created=500, minutes_since_interaction=90)
    stray = await add_lead(db_session, organization.id, "frio", "em_conversa", minutes_since_created=10)
    fresh = await add_lead(db_session, organization.id, "novo", minutes_since_created=10)

    report = await run_organization_transitions(sql_store, organization.id, now=NOW)

    assert report.transitions_made == 1
    assert report.substatuses_cleared == 1
    assert report.substatuses_updated == 1

    cold_row = await load_lead(session_factory, cold.id)
    assert cold_row.temperature == "frio"
    assert cold_row.hot_substatus is None
    assert cold_row.lost_reason is None

    awaiting_row = await load_lead(session_factory, awaiting.id)
    assert awaiting_row.temperature == "quente"
    assert awaiting_row.hot_substatus == "aguardando_resposta"

    stray_row = await load_lead(session_factory, stray.id)
    assert stray_row.hot_substatus is None

    fresh_row = await load_lead(session_factory, fresh.id)
    assert fresh_row.updated_at.replace(tzinfo=None) == minutes_ago(10).replace(tzinfo=None)


async def test_second_run_same_now_does_not_touch_rows(sql_store, session_factory, db_session, organization):
    lead = await add_lead(db_session, organization.id, "novo", minutes_since_created=2000)

    await run_organization_transitions(sql_store, organization.id, now=NOW)
    first_updated_at = (await load_lead(session_factory, lead.id)).updated_at

    later = NOW + timedelta(seconds=1)
    second = await run_organization_transitions(sql_store, organization.id, now=later)

    assert second.transitions_made == 0
    assert (await load_lead(session_factory, lead.id)).updated_at == first_updated_at


async def test_verbose_runner_creates_panel_notification(sql_store, session_factory, db_session, organization):
    await add_lead(db_session, organization.id, "novo", minutes_since_created=2000)

    async def notifier(organization_id, report):
        await notify_transition_summary(
            session_factory, organization_id, report.transitions_made, report.substatuses_cleared
        )

    runner = LeadTransitionRunner(sql_store, verbose=True, notifier=notifier, clock=FakeClock())
    await runner.run(organization.id, now=NOW)

    async with session_factory() as session:
        result = await session.execute(select(Notification))
        notifications = result.scalars().all()

    assert len(notifications) == 1
    assert notifications[0].type == "auto_transitions"
    assert notifications[0].message == "Transições automáticas: 1 leads movidos, 0 substatus limpos"
