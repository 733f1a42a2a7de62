from __future__ import annotations
"""Input validation helpers shared by routes and services.

Every helper either returns the cleaned value (to enable inline usage) or
raises InvalidArgument, which renders as HTTP 400 before any write happens.
"""
import re
from datetime import datetime, timezone
from typing import Any, Optional
from studio.errors import InvalidArgument

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MOBILE_RE = re.compile(r'^\+?\d{7,15}$')


def require_text(value: Any, field_name: str, max_length: int = 255) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f'{field_name} required')
    value = value.strip()
    if len(value) > max_length:
        raise InvalidArgument(f'{field_name} too long')
    return value


def optional_text(value: Any, field_name: str, max_length: int = 2000) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument(f'{field_name} must be a string')
    value = value.strip()
    if len(value) > max_length:
        raise InvalidArgument(f'{field_name} too long')
    return value or None


def validate_email(value: Any, required: bool = True) -> Optional[str]:
    if value in (None, ''):
        if required:
            raise InvalidArgument('email required')
        return None
    if not isinstance(value, str) or not EMAIL_RE.match(value.strip()):
        raise InvalidArgument('email invalid')
    return value.strip().lower()


def validate_mobile(value: Any, required: bool = True) -> Optional[str]:
    if value in (None, ''):
        if required:
            raise InvalidArgument('mobile required')
        return None
    cleaned = re.sub(r'[\s\-()]', '', str(value))
    if not MOBILE_RE.match(cleaned):
        raise InvalidArgument('mobile invalid')
    return cleaned


def parse_int(value: Any, field_name: str, required: bool = True) -> Optional[int]:
    if value in (None, ''):
        if required:
            raise InvalidArgument(f'{field_name} required')
        return None
    if isinstance(value, bool):
        raise InvalidArgument(f'{field_name} must be int')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f'{field_name} must be int')


def parse_datetime(value: Any, field_name: str) -> datetime:
    """Parse ISO 8601 (``Z`` accepted); naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        raise InvalidArgument(f'{field_name} required')
    try:
        dt = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise InvalidArgument(f'{field_name} must be ISO 8601')
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def isoformat(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat().replace('+00:00', 'Z')

__all__ = [
    'require_text', 'optional_text', 'validate_email', 'validate_mobile',
    'parse_int', 'parse_datetime', 'isoformat',
]
