from __future__ import annotations
"""Audit logging decorator for state-changing route handlers.

Usage:

@audit_log('SERVICE.CREATE', entity='Service', entity_id_key='id', meta_keys=['name'])
def create_service():
    ... return {'id': s.id, 'name': s.name}, 201

@audit_log('JOB.STATUS', entity='Job', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_job(kw.get('job_id')))
def update_status(job_id): ...

Parameters:
  action: audit action code (e.g. JOB.CREATE)
  entity: optional entity label (Job, Vendor, User)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: view argument to use for entity_id when the key is absent.
  meta_keys: keys projected from the returned JSON into meta.
  meta_builder: callable(data, rv, args, kwargs) -> meta; overrides meta_keys.
  diff_keys / pre_fetch: record before/after values for the listed keys.

Only successful responses (status < 400) are audited. Audit failures are
logged and never change the response.
"""

import logging
from functools import wraps
from typing import Any, Callable, Iterable, Optional, Dict

from studio.services.audit import add_audit
from studio import get_db

log = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    """Return (data, status) where data is the JSON-able dict for inspection."""
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def _changes(before: Dict[str, Any], after: Dict[str, Any], keys: Iterable[str]):
    out = {}
    for k in keys:
        if k in before and k in after and before.get(k) != after.get(k):
            out[k] = {'before': before.get(k), 'after': after.get(k)}
    return out


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
            rv = fn(*args, **kwargs)
            data, status = _extract_payload(rv)
            if status >= 400:
                return rv
            try:
                if not isinstance(data, dict):
                    add_audit(action, entity, kwargs.get(entity_id_arg) if entity_id_arg else None, None)
                else:
                    entity_id = None
                    if entity_id_key and entity_id_key in data:
                        entity_id = data.get(entity_id_key)
                    elif entity_id_arg and entity_id_arg in kwargs:
                        entity_id = kwargs.get(entity_id_arg)
                    meta = None
                    if meta_builder:
                        meta = meta_builder(data, rv, args, kwargs)
                    elif meta_keys:
                        meta = {k: data.get(k) for k in meta_keys if k in data}
                    if diff_keys and isinstance(before, dict):
                        changes = _changes(before, data, diff_keys)
                        if changes:
                            meta = dict(meta or {})
                            meta['changes'] = changes
                    add_audit(action, entity, entity_id, meta)
                get_db().commit()
            except Exception:
                log.exception('audit write failed for %s', action)
                get_db().rollback()
            return rv
        return wrapper
    return outer
