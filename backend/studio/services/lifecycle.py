"""Job status lifecycle.

Any status may move to any status (the status selector in the dashboard is
free-form). Side effects on entry:

* IN_PROGRESS sets ``started_at`` once and never overwrites it;
* COMPLETED stamps ``completed_at`` on every entry;
* every transition stamps ``updated_at``.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from studio.models.job import Job
from studio.utils.fsm import TransitionValidator, fully_connected
from studio.errors import InvalidTransition

JOB_TRANSITIONS = fully_connected(Job.ALL_STATUSES)
JOB_FSM = TransitionValidator(JOB_TRANSITIONS)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def apply_status_transition(job: Job, target: str, now: Optional[datetime] = None) -> Job:
    """Move ``job`` to ``target`` in place and stamp the lifecycle timestamps."""
    current = job.status or Job.STATUS_PENDING
    if target not in JOB_FSM.states:
        raise InvalidTransition(JOB_FSM.field_name, current, target)
    JOB_FSM.assert_can_transition(current, target)
    now = now or utcnow()
    job.status = target
    if target == Job.STATUS_IN_PROGRESS and job.started_at is None:
        job.started_at = now
    if target == Job.STATUS_COMPLETED:
        job.completed_at = now
    job.updated_at = now
    return job


__all__ = ['JOB_TRANSITIONS', 'JOB_FSM', 'apply_status_transition', 'utcnow']
