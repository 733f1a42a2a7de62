"""Domain exceptions.

Each error is a werkzeug HTTP exception so the app-level handler renders it
in the standard ``{"error": {...}}`` shape without extra wiring, while pure
helpers (commission, lifecycle) can raise them outside a request.
"""
from __future__ import annotations
from werkzeug.exceptions import BadRequest, Conflict, InternalServerError


class InvalidArgument(BadRequest):
    """A value failed validation before any write happened."""

    def __init__(self, description: str):
        super().__init__(description=description)


class InvalidTransition(BadRequest):
    def __init__(self, field_name: str, current, target):
        self.current = current
        self.target = target
        super().__init__(description=f"Invalid {field_name} transition {current} -> {target}")


class ConflictError(Conflict):
    def __init__(self, description: str):
        super().__init__(description=description)


class UpstreamError(InternalServerError):
    """Failure reported by an external collaborator (identity provider)."""

    def __init__(self, description: str, *, provider: str = 'identity'):
        self.provider = provider
        super().__init__(description=description)


__all__ = ['InvalidArgument', 'InvalidTransition', 'ConflictError', 'UpstreamError']
