from __future__ import annotations
"""Finite state machine helper for status fields.

Transitions are declared as an explicit allowed-pairs table so a tightened
workflow only needs a different graph:

    JOB_FSM = TransitionValidator(fully_connected(Job.ALL_STATUSES))
    JOB_FSM.assert_can_transition(job.status, 'COMPLETED')

Raises InvalidTransition (HTTP 400) for pairs missing from the table.
"""
from typing import Dict, Iterable, Set
from studio.errors import InvalidTransition


def fully_connected(states: Iterable[str]) -> Dict[str, Set[str]]:
    """Graph where every state reaches every state, itself included."""
    states = tuple(states)
    return {s: set(states) for s in states}


class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    @property
    def states(self) -> Set[str]:
        return set(self.graph)

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise InvalidTransition(self.field_name, current, target)
        return True

__all__ = ['TransitionValidator', 'fully_connected']
