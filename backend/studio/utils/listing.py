from __future__ import annotations
from typing import Callable, Iterable, Optional, Tuple
from flask import request, abort, make_response, jsonify
from sqlalchemy.orm import Query
from studio.config.pagination import normalize_pagination
import hashlib
import json
from datetime import datetime, timezone, timedelta
from email.utils import parsedate_to_datetime, format_datetime

TIMESTAMP_TOLERANCE = timedelta(seconds=1)

def canonicalize_timestamp(dt: datetime) -> datetime:
    """Return UTC tz-aware timestamp truncated to whole seconds (microseconds removed)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0)

def _iso(dt: datetime) -> str:
    return canonicalize_timestamp(dt).isoformat().replace('+00:00', 'Z')

def apply_pagination(q: Query) -> Tuple[Query, int, int, int]:
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'), request.args.get('page'))
    except ValueError as e:
        abort(400, description=str(e))
    total = q.order_by(None).count()
    return q.offset(offset).limit(limit), total, limit, offset

def compute_etag(ids: Iterable[int], total: int, limit: int, offset: int, latest_ts: Optional[str] = '') -> str:
    seed = f"{list(ids)}|{total}|{limit}|{offset}|{latest_ts or ''}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]

def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }

def _http_date(dt: datetime) -> str:
    """Return RFC1123 HTTP-date string in GMT."""
    return format_datetime(canonicalize_timestamp(dt), usegmt=True)

def _set_validators(resp, etag: str, latest_ts: Optional[datetime]):
    resp.headers['ETag'] = etag
    if latest_ts:
        resp.headers['Last-Modified'] = _http_date(latest_ts)
        # Canonical ISO copy for clients that prefer it
        resp.headers['X-Last-Modified-ISO'] = _iso(latest_ts)
    return resp

def _parse_if_modified_since(header_val: str) -> Optional[datetime]:
    if not header_val:
        return None
    try:
        dt = datetime.fromisoformat(header_val.replace('Z', '+00:00'))
    except ValueError:
        try:
            dt = parsedate_to_datetime(header_val)
        except (TypeError, ValueError):
            return None
    if dt and dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

def handle_conditional(etag_value: str, latest_ts: Optional[datetime]):
    """Evaluate conditional request headers.

    Precedence: If-None-Match over If-Modified-Since (per RFC 9110 semantics).
    Returns a 304 response object if conditions satisfied, else None.
    """
    inm = request.headers.get('If-None-Match')
    if inm:
        if inm.strip('"') == etag_value:
            return _set_validators(make_response('', 304), etag_value, latest_ts)
        return None
    ims_dt = _parse_if_modified_since(request.headers.get('If-Modified-Since'))
    if ims_dt and latest_ts:
        if canonicalize_timestamp(latest_ts) <= canonicalize_timestamp(ims_dt) + TIMESTAMP_TOLERANCE:
            return _set_validators(make_response('', 304), etag_value, latest_ts)
    return None

def respond_list(q: Query, serialize: Callable, ts_attr: str = 'updated_at'):
    """Paginate ``q`` and return a JSON list response with cache validators.

    HEAD requests get the same headers and an empty body. The newest
    ``ts_attr`` across the page feeds Last-Modified and the ETag seed.
    """
    paged_q, total, limit, offset = apply_pagination(q)
    rows = paged_q.all()
    stamps = [getattr(r, ts_attr) for r in rows if getattr(r, ts_attr, None) is not None]
    latest_ts = max((canonicalize_timestamp(s) for s in stamps), default=None)
    rows_json = [serialize(r) for r in rows]
    etag = compute_etag([r.get('id') for r in rows_json], total, limit, offset, _iso(latest_ts) if latest_ts else '')
    cond = handle_conditional(etag, latest_ts)
    if cond:
        return cond
    resp = _set_validators(make_response(jsonify(build_list_payload(rows_json, total, limit, offset))), etag, latest_ts)
    if request.method == 'HEAD':
        resp.set_data(b'')
    return resp

def latest_timestamp(*stamps: Optional[datetime]) -> Optional[datetime]:
    present = [canonicalize_timestamp(s) for s in stamps if s is not None]
    return max(present, default=None)

def respond_single(body: dict, latest_ts: Optional[datetime]):
    """Single-resource response with cache validators.

    The ETag is seeded with a digest of the whole body, so derived fields
    (child rows, counts) change it even when ``latest_ts`` does not move.
    """
    digest = hashlib.sha256(json.dumps(body, sort_keys=True, default=str).encode()).hexdigest()
    etag = compute_etag([body.get('id')], 1, 1, 0, f"{_iso(latest_ts) if latest_ts else ''}|{digest}")
    cond = handle_conditional(etag, latest_ts)
    if cond:
        return cond
    resp = _set_validators(make_response(jsonify(body)), etag, latest_ts)
    if request.method == 'HEAD':
        resp.set_data(b'')
    return resp
