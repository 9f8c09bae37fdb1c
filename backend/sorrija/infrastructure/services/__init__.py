from .auth_service import create_access_token, decode_access_token
from .crm_settings_service import (
    InvalidSettingsError,
    get_crm_settings,
    get_or_create_crm_settings,
    update_crm_settings,
    validate_crm_settings,
)
from .lead_transition_store import (
    LeadTransitionStore,
    SqlAlchemyLeadTransitionStore,
    TransitionStoreError,
)
from .notification_service import create_panel_notification, notify_transition_summary
from .temperature_rule_service import (
    InvalidRuleError,
    RuleNotFoundError,
    create_rule,
    delete_rule,
    get_active_rules,
    get_rule,
    list_rules,
    reorder_rules,
    update_rule,
)

__all__ = [
    "create_access_token",
    "decode_access_token",
    "InvalidSettingsError",
    "get_crm_settings",
    "get_or_create_crm_settings",
    "update_crm_settings",
    "validate_crm_settings",
    "LeadTransitionStore",
    "SqlAlchemyLeadTransitionStore",
    "TransitionStoreError",
    "create_panel_notification",
    "notify_transition_summary",
    "InvalidRuleError",
    "RuleNotFoundError",
    "create_rule",
    "delete_rule",
    "get_active_rules",
    "get_rule",
    "list_rules",
    "reorder_rules",
    "update_rule",
]
