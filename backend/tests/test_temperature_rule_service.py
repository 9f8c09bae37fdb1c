import pytest

from sorrija.infrastructure.services.temperature_rule_service import (
    InvalidRuleError,
    RuleNotFoundError,
    create_rule,
    delete_rule,
    get_active_rules,
    list_rules,
    reorder_rules,
    update_rule,
    validate_rule,
)


def rule_data(**overrides) -> dict:
    data = {
        "name": "Quente parado vira frio",
        "trigger_event": "inactivity_timer",
        "from_temperature": "quente",
        "timer_minutes": 120,
        "action_set_temperature": "frio",
        "action_clear_substatus": True,
    }
    data.update(overrides)
    return data


async def test_create_appends_to_end_of_priority_list(db_session, organization):
    first = await create_rule(db_session, organization.id, rule_data(name="Primeira"))
    second = await create_rule(db_session, organization.id, rule_data(name="Segunda"))

    assert first.priority == 0
    assert second.priority == 1


async def test_update_and_deactivate_rule(db_session, organization):
    rule = await create_rule(db_session, organization.id, rule_data())

    await update_rule(db_session, organization.id, rule.id, {"timer_minutes": 30, "active": False})

    assert rule.timer_minutes == 30
    assert await get_active_rules(db_session, organization.id) == []


async def test_update_validates_merged_rule(db_session, organization):
    rule = await create_rule(db_session, organization.id, rule_data())

    with pytest.raises(InvalidRuleError):
        await update_rule(db_session, organization.id, rule.id, {"action_set_substatus": "em_conversa"})


async def test_reorder_sets_priority_by_position(db_session, organization):
    a = await create_rule(db_session, organization.id, rule_data(name="A"))
    b = await create_rule(db_session, organization.id, rule_data(name="B"))
    c = await create_rule(db_session, organization.id, rule_data(name="C"))

    ordered = await reorder_rules(db_session, organization.id, [c.id, a.id, b.id])

    assert [rule.name for rule in ordered] == ["C", "A", "B"]
    assert [rule.priority for rule in ordered] == [0, 1, 2]


async def test_reorder_rejects_unknown_and_repeated_ids(db_session, organization):
    a = await create_rule(db_session, organization.id, rule_data(name="A"))

    with pytest.raises(RuleNotFoundError):
        await reorder_rules(db_session, organization.id, [a.id, 999])
    with pytest.raises(InvalidRuleError):
        await reorder_rules(db_session, organization.id, [a.id, a.id])


async def test_delete_rule(db_session, organization):
    rule = await create_rule(db_session, organization.id, rule_data())

    await delete_rule(db_session, organization.id, rule.id)

    assert await list_rules(db_session, organization.id) == []
    with pytest.raises(RuleNotFoundError):
        await delete_rule(db_session, organization.id, rule.id)


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": "  "},
        {"trigger_event": "on_message"},
        {"from_temperature": "morno"},
        {"timer_minutes": 0},
        {"action_set_temperature": "perdido"},
        {"action_set_temperature": None, "action_clear_substatus": False},
        {"action_set_substatus": "em_conversa", "action_clear_substatus": True},
    ],
)
def test_validate_rule_rejects_invalid_rules(overrides):
    with pytest.raises(InvalidRuleError):
        validate_rule(rule_data(**overrides))
