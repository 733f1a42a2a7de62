from __future__ import annotations
from studio.errors import InvalidArgument


def apply_multi_sort(query, sort_expr: str | None, allowed: dict, tie_breaker, default=None):
    """Order ``query`` by a ``?sort=`` expression such as ``-amount,created_at``.

    Keys must be in ``allowed`` and may appear once; a leading ``-`` means
    descending. Without an expression the endpoint's ``default`` ordering is
    used. ``tie_breaker`` goes last unless the caller already sorted on it,
    so paging stays stable.
    """
    clauses = []
    used = set()
    for token in (t.strip() for t in (sort_expr or '').split(',')):
        if not token:
            continue
        desc = token.startswith('-')
        key = token[1:] if desc else token
        col = allowed.get(key)
        if col is None:
            raise InvalidArgument(f'Invalid sort field {key}')
        if key in used:
            raise InvalidArgument(f'Duplicate sort field {key}')
        used.add(key)
        clauses.append(col.desc() if desc else col.asc())
    if not clauses and default is not None:
        clauses.append(default)
    if not any(allowed[k] is tie_breaker for k in used):
        clauses.append(tie_breaker.asc())
    return query.order_by(*clauses)
