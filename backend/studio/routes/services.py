from __future__ import annotations
from flask import Blueprint, request, abort
from sqlalchemy import select
from studio import get_db
from studio.errors import ConflictError
from studio.models.service import Service
from studio.models.job import Job
from studio.decorators.auth import require_roles
from studio.decorators.audit import audit_log
from studio.models.authz import ROLE_ADMIN, ROLE_MANAGER
from studio.services.eligibility import eligible_staff_for_service
from studio.utils.listing import respond_list, respond_single
from studio.utils.filters import apply_filters, search_filter
from studio.utils.sorting import apply_multi_sort
from studio.utils.validation import require_text, isoformat

services_bp = Blueprint('services', __name__)


def _get_service(service_id: int) -> Service:
    s = get_db().execute(select(Service).where(Service.id==service_id)).scalar_one_or_none()
    if not s:
        abort(404)
    return s


def _ensure_unique_name(name: str, exclude_id: int = None):
    q = select(Service).where(Service.name==name)
    if exclude_id is not None:
        q = q.where(Service.id!=exclude_id)
    if get_db().execute(q).scalar_one_or_none():
        raise ConflictError('service name already exists')


@services_bp.get('')
@require_roles()
def list_services():
    session = get_db()
    q = session.query(Service)
    q = apply_filters(q, {'search': {'op': search_filter(Service.name)}}, request.args)
    allowed = {'name': Service.name, 'created_at': Service.created_at, 'updated_at': Service.updated_at, 'id': Service.id}
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Service.id, default=Service.name.asc())
    return respond_list(q, _service_json)


@services_bp.get('/<int:service_id>')
@require_roles()
def get_service(service_id: int):
    s = _get_service(service_id)
    return respond_single(_service_json(s), s.updated_at)


@services_bp.post('')
@require_roles(action='SERVICE.MANAGE')
@audit_log('SERVICE.CREATE', entity='Service', entity_id_key='id', meta_keys=['name'])
def create_service():
    session = get_db()
    data = request.json or {}
    name = require_text(data.get('name'), 'name', 150)
    _ensure_unique_name(name)
    s = Service(name=name)
    session.add(s)
    session.commit()
    return _service_json(s), 201


@services_bp.put('/<int:service_id>')
@require_roles(action='SERVICE.MANAGE')
@audit_log('SERVICE.UPDATE', entity='Service', entity_id_key='id', diff_keys=['name'], pre_fetch=lambda a, kw: _prefetch_service(kw.get('service_id')), meta_keys=['name'])
def update_service(service_id: int):
    session = get_db()
    s = _get_service(service_id)
    data = request.json or {}
    name = require_text(data.get('name'), 'name', 150)
    _ensure_unique_name(name, exclude_id=s.id)
    s.name = name
    session.commit()
    return _service_json(s)


@services_bp.delete('/<int:service_id>')
@require_roles(action='SERVICE.MANAGE')
@audit_log('SERVICE.DELETE', entity='Service', entity_id_arg='service_id', meta_keys=['name'])
def delete_service(service_id: int):
    session = get_db()
    s = _get_service(service_id)
    if session.execute(select(Job.id).where(Job.service_id==s.id).limit(1)).first():
        raise ConflictError('service is used by existing jobs')
    name = s.name
    session.delete(s)
    session.commit()
    return {'status': 'deleted', 'name': name}


@services_bp.get('/<int:service_id>/eligible-staff')
@require_roles(ROLE_ADMIN, ROLE_MANAGER)
def eligible_staff(service_id: int):
    _get_service(service_id)
    items = eligible_staff_for_service(service_id)
    return {'service_id': service_id, 'items': [e.to_json() for e in items]}


def _service_json(s: Service):
    return {
        'id': s.id,
        'name': s.name,
        'created_at': isoformat(s.created_at),
        'updated_at': isoformat(s.updated_at),
    }


def _prefetch_service(service_id: int):
    s = get_db().execute(select(Service).where(Service.id==service_id)).scalar_one_or_none()
    return {'name': s.name} if s else {}
