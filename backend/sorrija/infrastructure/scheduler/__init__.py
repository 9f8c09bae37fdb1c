"""
Scheduler de Jobs (APScheduler)
"""

from .scheduler import (
    AUTO_TRANSITIONS_JOB_ID,
    AUTO_TRANSITIONS_STARTUP_JOB_ID,
    get_scheduler,
    create_scheduler,
    start_scheduler,
    stop_scheduler,
    get_scheduler_status,
    run_job_now,
)

__all__ = [
    "AUTO_TRANSITIONS_JOB_ID",
    "AUTO_TRANSITIONS_STARTUP_JOB_ID",
    "get_scheduler",
    "create_scheduler",
    "start_scheduler",
    "stop_scheduler",
    "get_scheduler_status",
    "run_job_now",
]
