"""
Testes da rodada de transições (aplicação das decisões) com store em memória.
"""

import pytest

from sorrija.domain.entities import CRMSettings
from sorrija.domain.services.temperature_rules import TransitionDecision
from sorrija.infrastructure.jobs.lead_transition_service import (
    build_lead_changes,
    run_organization_transitions,
)
from sorrija.infrastructure.services.lead_transition_store import TransitionStoreError
from tests.utils import NOW, InMemoryLeadStore, make_rule, snapshot


def mixed_leads():
    return [
        snapshot(1, "novo", minutes_since_created=2 * 24 * 60),                     # → frio
        snapshot(2, "quente", "em_conversa", minutes_since_interaction=90),         # → aguardando
        snapshot(3, "frio", "em_conversa", minutes_since_created=10),               # substatus limpo
        snapshot(4, "novo", minutes_since_created=10),                              # nada
        snapshot(5, "perdido", minutes_since_created=100_000),                      # nada
    ]


async def test_run_applies_decisions_and_counts():
    store = InMemoryLeadStore(mixed_leads())

    report = await run_organization_transitions(store, organization_id=1, now=NOW)

    assert report.leads_evaluated == 5
    assert report.transitions_made == 1
    assert report.substatuses_cleared == 1
    assert report.substatuses_updated == 1
    assert report.errors == []

    assert store.rows[1]["temperature"] == "frio"
    assert store.rows[1]["hot_substatus"] is None
    assert store.rows[2]["temperature"] == "quente"
    assert store.rows[2]["hot_substatus"] == "aguardando_resposta"
    assert store.rows[3]["hot_substatus"] is None
    assert sorted(lead_id for lead_id, _ in store.writes) == [1, 2, 3]


async def test_leads_without_transition_are_not_written():
    store = InMemoryLeadStore(mixed_leads())
    untouched_updated_at = store.rows[4]["updated_at"]

    await run_organization_transitions(store, organization_id=1, now=NOW)

    assert 4 not in [lead_id for lead_id, _ in store.writes]
    assert store.rows[4]["updated_at"] == untouched_updated_at


async def test_second_run_with_same_now_is_a_no_op():
    leads = mixed_leads() + [
        snapshot(6, "quente", "em_conversa", minutes_since_interaction=50 * 60),   # → aguardando → frio
        snapshot(7, "quente", None, minutes_since_interaction=90),                 # → em_conversa → aguardando
        snapshot(8, "novo", minutes_since_created=10, lost_reason="planilha"),     # motivo limpo
    ]
    store = InMemoryLeadStore(leads)

    first = await run_organization_transitions(store, organization_id=1, now=NOW)
    writes_after_first_run = len(store.writes)
    second = await run_organization_transitions(store, organization_id=1, now=NOW)

    assert first.transitions_made == 2
    assert store.rows[6]["temperature"] == "frio"
    assert store.rows[7]["hot_substatus"] == "aguardando_resposta"

    assert second.transitions_made == 0
    assert second.substatuses_cleared == 0
    assert second.substatuses_updated == 0
    assert second.lost_reasons_cleared == 0
    assert not second.has_changes
    assert len(store.writes) == writes_after_first_run


async def test_lost_reason_left_on_open_lead_is_cleared():
    store = InMemoryLeadStore([snapshot(1, "novo", minutes_since_created=10, lost_reason="planilha")])

    report = await run_organization_transitions(store, organization_id=1, now=NOW)

    assert report.lost_reasons_cleared == 1
    assert report.has_changes
    assert store.rows[1]["lost_reason"] is None
    assert store.rows[1]["temperature"] == "novo"


async def test_lead_changed_after_read_is_skipped():
    store = InMemoryLeadStore([snapshot(1, "novo", minutes_since_created=2000)])
    original_get_leads = store.get_leads

    async def get_leads_then_manual_edit(organization_id):
        leads = await original_get_leads(organization_id)
        store.rows[1].update(temperature="quente", hot_substatus="em_negociacao")
        return leads

    store.get_leads = get_leads_then_manual_edit

    report = await run_organization_transitions(store, organization_id=1, now=NOW)

    assert report.leads_skipped == 1
    assert report.transitions_made == 0
    assert report.errors == []
    assert store.rows[1]["temperature"] == "quente"
    assert store.writes == []


async def test_invariants_hold_after_run():
    leads = mixed_leads() + [
        snapshot(6, "quente", None, minutes_since_interaction=5),
        snapshot(7, "novo", "aguardando_resposta", minutes_since_created=10),
    ]
    store = InMemoryLeadStore(leads)
    store.rows[1]["lost_reason"] = "sem orçamento"

    await run_organization_transitions(store, organization_id=1, now=NOW)

    for row in store.rows.values():
        assert (row["hot_substatus"] is not None) == (row["temperature"] == "quente")
        if row["lost_reason"] is not None:
            assert row["temperature"] == "perdido"


async def test_write_failure_does_not_abort_batch():
    store = InMemoryLeadStore(mixed_leads(), failing_lead_ids={1})

    report = await run_organization_transitions(store, organization_id=1, now=NOW)

    assert [error.lead_id for error in report.errors] == [1]
    assert report.transitions_made == 0
    assert report.substatuses_updated == 1
    assert report.substatuses_cleared == 1
    assert store.rows[1]["temperature"] == "novo"


async def test_read_failure_aborts_before_any_write():
    store = InMemoryLeadStore(mixed_leads(), read_error=TransitionStoreError("banco fora"))

    with pytest.raises(TransitionStoreError):
        await run_organization_transitions(store, organization_id=1, now=NOW)

    assert store.writes == []


async def test_custom_rules_from_store_are_used():
    rule = make_rule(from_temperature="novo", timer_minutes=5, action_set_temperature="quente")
    store = InMemoryLeadStore(
        [snapshot(1, "novo", minutes_since_created=10)],
        settings=CRMSettings.with_defaults(1),
        rules=[rule],
    )

    report = await run_organization_transitions(store, organization_id=1, now=NOW)

    assert report.transitions_made == 1
    assert store.rows[1]["temperature"] == "quente"
    assert store.rows[1]["hot_substatus"] == "em_conversa"


def test_changes_include_only_changed_temperature():
    substatus_only = TransitionDecision(
        lead_id=1,
        previous_temperature="quente",
        previous_substatus="em_conversa",
        next_temperature="quente",
        next_hot_substatus="aguardando_resposta",
        clear_substatus=False,
        reason="teste",
    )

    changes = build_lead_changes(substatus_only, NOW)

    assert "temperature" not in changes
    assert changes == {"hot_substatus": "aguardando_resposta", "lost_reason": None, "updated_at": NOW}
