from __future__ import annotations
from flask import Blueprint, request, abort
from flask_jwt_extended import get_jwt_identity
from sqlalchemy import select, update, func
from studio import get_db
from studio.models.vendor import Vendor
from studio.models.job import Job
from studio.decorators.auth import require_roles
from studio.decorators.audit import audit_log
from studio.utils.listing import respond_list, respond_single, latest_timestamp
from studio.utils.filters import apply_filters, search_filter
from studio.utils.sorting import apply_multi_sort
from studio.utils.validation import require_text, optional_text, validate_email, validate_mobile, isoformat

vendors_bp = Blueprint('vendors', __name__)

VENDOR_FIELDS = ('studio_name', 'contact_person', 'mobile', 'email', 'location', 'notes')


def _clean_vendor_fields(data: dict, partial: bool = False) -> dict:
    out = {}
    if not partial or 'studio_name' in data:
        out['studio_name'] = require_text(data.get('studio_name'), 'studio_name', 150)
    if not partial or 'contact_person' in data:
        out['contact_person'] = require_text(data.get('contact_person'), 'contact_person', 150)
    if not partial or 'mobile' in data:
        out['mobile'] = validate_mobile(data.get('mobile'))
    if not partial or 'email' in data:
        out['email'] = validate_email(data.get('email'), required=False)
    if not partial or 'location' in data:
        out['location'] = optional_text(data.get('location'), 'location', 255)
    if not partial or 'notes' in data:
        out['notes'] = optional_text(data.get('notes'), 'notes')
    return out


def create_vendor_record(data: dict, actor_id: int) -> Vendor:
    unknown = set(data) - set(VENDOR_FIELDS)
    if unknown:
        abort(400, description=f'unknown vendor fields: {sorted(unknown)}')
    session = get_db()
    v = Vendor(created_by=actor_id, **_clean_vendor_fields(data))
    session.add(v); session.commit()
    return v


@vendors_bp.get('')
@require_roles(action='VENDOR.READ')
def list_vendors():
    session = get_db()
    q = session.query(Vendor)
    filter_specs = {
        'search': {'op': search_filter(Vendor.studio_name, Vendor.contact_person, Vendor.email, Vendor.location)},
        'location': {'op': lambda qu, v: qu.filter(Vendor.location.ilike(f'%{v}%'))},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'studio_name': Vendor.studio_name,
        'contact_person': Vendor.contact_person,
        'created_at': Vendor.created_at,
        'updated_at': Vendor.updated_at,
        'id': Vendor.id
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Vendor.id, default=Vendor.studio_name.asc())
    return respond_list(q, vendor_json)


@vendors_bp.post('')
@require_roles(action='VENDOR.CREATE')
@audit_log('VENDOR.CREATE', entity='Vendor', entity_id_key='id', meta_keys=['studio_name'])
def create_vendor():
    v = create_vendor_record(request.json or {}, int(get_jwt_identity()))
    return vendor_json(v), 201


@vendors_bp.get('/<int:vendor_id>')
@require_roles(action='VENDOR.READ')
def get_vendor(vendor_id: int):
    session = get_db()
    v = session.execute(select(Vendor).where(Vendor.id==vendor_id)).scalar_one_or_none()
    if not v:
        abort(404)
    body = vendor_json(v)
    body['job_count'] = session.query(Job).filter(Job.vendor_id==v.id).count()
    last_job = session.execute(select(func.max(Job.updated_at)).where(Job.vendor_id==v.id)).scalar_one_or_none()
    return respond_single(body, latest_timestamp(v.updated_at, last_job))


@vendors_bp.put('/<int:vendor_id>')
@require_roles(action='VENDOR.MANAGE')
@audit_log('VENDOR.UPDATE', entity='Vendor', entity_id_key='id', diff_keys=list(VENDOR_FIELDS), pre_fetch=lambda a, kw: _prefetch_vendor(kw.get('vendor_id')), meta_keys=['studio_name'])
def update_vendor(vendor_id: int):
    session = get_db()
    v = session.execute(select(Vendor).where(Vendor.id==vendor_id)).scalar_one_or_none()
    if not v:
        abort(404)
    for key, value in _clean_vendor_fields(request.json or {}, partial=True).items():
        setattr(v, key, value)
    session.commit(); return vendor_json(v)


@vendors_bp.delete('/<int:vendor_id>')
@require_roles(action='VENDOR.MANAGE')
@audit_log('VENDOR.DELETE', entity='Vendor', entity_id_arg='vendor_id', meta_keys=['studio_name'])
def delete_vendor(vendor_id: int):
    session = get_db()
    v = session.execute(select(Vendor).where(Vendor.id==vendor_id)).scalar_one_or_none()
    if not v:
        abort(404)
    name = v.studio_name
    # jobs keep their history without the vendor link
    session.execute(update(Job).where(Job.vendor_id==vendor_id).values(vendor_id=None))
    session.delete(v)
    session.commit()
    return {'status': 'deleted', 'studio_name': name}


def vendor_json(v: Vendor):
    return {
        'id': v.id,
        'studio_name': v.studio_name,
        'contact_person': v.contact_person,
        'mobile': v.mobile,
        'email': v.email,
        'location': v.location,
        'notes': v.notes,
        'created_by': v.created_by,
        'created_at': isoformat(v.created_at),
        'updated_at': isoformat(v.updated_at),
    }


def _prefetch_vendor(vendor_id: int):
    session = get_db()
    v = session.execute(select(Vendor).where(Vendor.id==vendor_id)).scalar_one_or_none()
    if not v:
        return {}
    return {k: getattr(v, k) for k in VENDOR_FIELDS}
