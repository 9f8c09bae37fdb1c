"""Serviços de domínio (regras puras, sem I/O)."""
from .temperature_rules import (
    LeadSnapshot,
    TransitionRule,
    TransitionDecision,
    RuleCheck,
    RuleTestResult,
    build_default_rules,
    build_rule_chain,
    resolve_transition,
    resolve_batch,
    simulate_transition_rule,
)
from .lead_temperature import (
    InvalidTemperatureChange,
    build_temperature_change,
)

__all__ = [
    "LeadSnapshot",
    "TransitionRule",
    "TransitionDecision",
    "RuleCheck",
    "RuleTestResult",
    "build_default_rules",
    "build_rule_chain",
    "resolve_transition",
    "resolve_batch",
    "simulate_transition_rule",
    "InvalidTemperatureChange",
    "build_temperature_change",
]
