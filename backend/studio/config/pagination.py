"""Listing page size defaults.

Dashboard tables page ten rows at a time; API clients may ask for more up to
MAX_LIMIT. A 1-based ``page`` may be sent instead of ``offset``.
"""
from typing import Optional, Tuple

DEFAULT_LIMIT = 10
MAX_LIMIT = 200


def _as_int(raw, name: str) -> Optional[int]:
    if raw is None or raw == '':
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f'{name} must be int')


def normalize_pagination(limit_raw, offset_raw, page_raw=None) -> Tuple[int, int]:
    limit = _as_int(limit_raw, 'limit')
    offset = _as_int(offset_raw, 'offset')
    page = _as_int(page_raw, 'page')
    limit = max(1, min(limit if limit is not None else DEFAULT_LIMIT, MAX_LIMIT))
    if offset is None and page is not None:
        offset = (max(page, 1) - 1) * limit
    offset = max(0, offset or 0)
    return limit, offset
