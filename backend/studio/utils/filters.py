from __future__ import annotations
from typing import Any, Dict, Mapping
from sqlalchemy import or_
from studio.errors import InvalidArgument


def apply_filters(query, specs: Dict[str, Dict[str, Any]], params: Mapping[str, Any]):
    """Apply query-string filters declared in ``specs``.

    specs: { param_name: { 'op': callable(query, value)->query, 'coerce': callable (optional),
                           'validate': callable(value)->bool (optional) } }
    Empty values are ignored, matching how the dashboard sends cleared filters.
    """
    for name, meta in specs.items():
        val = params.get(name)
        if val is None or val == '':
            continue
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except (TypeError, ValueError):
                raise InvalidArgument(f'{name} invalid')
        if 'validate' in meta and not meta['validate'](val):
            raise InvalidArgument(f'{name} invalid')
        query = meta['op'](query, val)
    return query


def search_filter(*columns):
    """Build an ``op`` doing case-insensitive substring match over ``columns``."""
    def op(query, term):
        pattern = f'%{term}%'
        return query.filter(or_(*[c.ilike(pattern) for c in columns]))
    return op
