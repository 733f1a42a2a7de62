from __future__ import annotations
from decimal import Decimal
from flask import Blueprint, request, abort
from sqlalchemy import select, func
from studio import get_db
from studio.models.authz import User, ALL_ROLES
from studio.models.job import Job
from studio.decorators.auth import require_roles
from studio.decorators.audit import audit_log
from studio.services import accounts
from studio.services.commission import money_str
from studio.utils.listing import respond_list, respond_single, latest_timestamp
from studio.utils.filters import apply_filters, search_filter
from studio.utils.sorting import apply_multi_sort
from studio.utils.validation import isoformat

staff_bp = Blueprint('staff', __name__)


def _get_staff(user_id: int) -> User:
    u = get_db().execute(select(User).where(User.id==user_id)).scalar_one_or_none()
    if not u:
        abort(404)
    return u


@staff_bp.get('')
@require_roles(action='STAFF.MANAGE')
def list_staff():
    session = get_db()
    q = session.query(User)
    filter_specs = {
        'search': {'op': search_filter(User.name, User.email)},
        'role': {'validate': lambda v: v in ALL_ROLES, 'op': lambda qu, v: qu.filter(User.role==v)},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {'name': User.name, 'email': User.email, 'role': User.role, 'created_at': User.created_at, 'id': User.id}
    q = apply_multi_sort(q, request.args.get('sort'), allowed, User.id, default=User.name.asc())
    return respond_list(q, _staff_json)


@staff_bp.get('/<int:user_id>')
@require_roles(action='STAFF.MANAGE')
def get_staff(user_id: int):
    u = _get_staff(user_id)
    body = _staff_json(u)
    body['configs'] = [_config_json(c) for c in sorted(u.service_configs, key=lambda c: c.service_id)]
    body['stats'] = _job_stats(u.id)
    last_job = get_db().execute(select(func.max(Job.updated_at)).where(Job.staff_id==u.id)).scalar_one_or_none()
    return respond_single(body, latest_timestamp(u.updated_at, last_job))


@staff_bp.put('/<int:user_id>/configs')
@require_roles(action='STAFF.MANAGE')
@audit_log('STAFF.CONFIGS.REPLACE', entity='User', entity_id_key='id', meta_builder=lambda data, rv, a, kw: {'service_ids': [c['service_id'] for c in data.get('configs', [])]})
def replace_configs(user_id: int):
    u = _get_staff(user_id)
    data = request.json or {}
    items = data.get('configs') if isinstance(data, dict) else data
    if items is not None and not isinstance(items, list):
        abort(400, description='configs must be a list')
    rows = accounts.replace_service_configs(u, items or [])
    return {'id': u.id, 'configs': [_config_json(c) for c in sorted(rows, key=lambda c: c.service_id)]}


@staff_bp.delete('/<int:user_id>')
@require_roles(action='STAFF.MANAGE')
@audit_log('USER.DELETE', entity='User', entity_id_arg='user_id', meta_keys=['email'])
def delete_staff(user_id: int):
    u = _get_staff(user_id)
    email = u.email
    accounts.delete_staff(u)
    return {'status': 'deleted', 'email': email}


def _job_stats(staff_id: int):
    session = get_db()
    rows = session.execute(
        select(Job.status, func.count(Job.id), func.coalesce(func.sum(Job.commission_amount), 0))
        .where(Job.staff_id==staff_id)
        .group_by(Job.status)
    ).all()
    by_status = {status: (count, Decimal(str(total))) for status, count, total in rows}
    return {
        'total_jobs': sum(c for c, _ in by_status.values()),
        'pending': by_status.get(Job.STATUS_PENDING, (0, 0))[0],
        'in_progress': by_status.get(Job.STATUS_IN_PROGRESS, (0, 0))[0],
        'completed': by_status.get(Job.STATUS_COMPLETED, (0, 0))[0],
        'total_commission': money_str(sum((t for _, t in by_status.values()), Decimal('0'))),
    }


def _config_json(c):
    return {
        'service_id': c.service_id,
        'percentage': money_str(c.percentage),
        'due_date_offset': c.due_date_offset,
    }


def _staff_json(u: User):
    return {
        'id': u.id,
        'name': u.name,
        'email': u.email,
        'mobile': u.mobile,
        'role': u.role,
        'created_at': isoformat(u.created_at),
        'updated_at': isoformat(u.updated_at),
    }
