"""Jobs em background (transições automáticas de leads)."""

from .auto_transitions_job import run_auto_transitions_job
from .lead_transition_service import (
    TransitionReport,
    apply_transitions,
    build_lead_changes,
    run_organization_transitions,
)
from .transition_runner import (
    ALREADY_RUNNING,
    COOLDOWN_ACTIVE,
    LeadTransitionRunner,
    TransitionResult,
    get_transition_runner,
    reset_transition_runner,
)

__all__ = [
    "run_auto_transitions_job",
    "TransitionReport",
    "apply_transitions",
    "build_lead_changes",
    "run_organization_transitions",
    "ALREADY_RUNNING",
    "COOLDOWN_ACTIVE",
    "LeadTransitionRunner",
    "TransitionResult",
    "get_transition_runner",
    "reset_transition_runner",
]
