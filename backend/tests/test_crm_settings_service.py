import pytest

from sorrija.infrastructure.services.crm_settings_service import (
    InvalidSettingsError,
    get_crm_settings,
    get_or_create_crm_settings,
    update_crm_settings,
    validate_crm_settings,
)


async def test_get_or_create_is_idempotent(db_session, organization):
    first = await get_or_create_crm_settings(db_session, organization.id)
    await db_session.commit()
    second = await get_or_create_crm_settings(db_session, organization.id)

    assert first.id == second.id
    assert second.hot_to_cold_days == 3
    assert second.aguardando_to_cold_hours == 48


async def test_update_changes_only_sent_fields(db_session, organization):
    settings = await update_crm_settings(db_session, organization.id, {"new_to_cold_minutes": 720})
    await db_session.commit()

    assert settings.new_to_cold_minutes == 720
    assert settings.em_conversa_timeout_minutes == 60

    stored = await get_crm_settings(db_session, organization.id)
    assert stored.new_to_cold_minutes == 720


async def test_update_rejects_unknown_fields(db_session, organization):
    with pytest.raises(InvalidSettingsError):
        await update_crm_settings(db_session, organization.id, {"organization_id": 99})


async def test_update_rejects_zero_hot_to_cold_window(db_session, organization):
    await update_crm_settings(db_session, organization.id, {"hot_to_cold_hours": 0})

    with pytest.raises(InvalidSettingsError):
        await update_crm_settings(db_session, organization.id, {"hot_to_cold_days": 0})


@pytest.mark.parametrize(
    "field_name, value",
    [
        ("new_to_cold_minutes", 0),
        ("hot_to_cold_hours", 24),
        ("em_conversa_timeout_minutes", -5),
        ("aguardando_to_cold_hours", 0),
    ],
)
def test_validate_rejects_out_of_range_values(field_name, value):
    values = {"hot_to_cold_days": 3, "hot_to_cold_hours": 0, field_name: value}

    with pytest.raises(InvalidSettingsError):
        validate_crm_settings(values)
