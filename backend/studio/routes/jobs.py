from __future__ import annotations
import logging
from flask import Blueprint, request, abort
from flask_jwt_extended import get_jwt_identity
from sqlalchemy import select
from studio import get_db
from studio.models.job import Job
from studio.decorators.auth import require_roles
from studio.decorators.audit import audit_log
from studio.services.jobs import create_job as create_job_record, edit_job, job_json
from studio.services.lifecycle import apply_status_transition
from studio.services.policy import load_current_user, role_allows, assert_can_view_job, assert_can_transition_job
from studio.utils.listing import respond_list, respond_single
from studio.utils.filters import apply_filters, search_filter
from studio.utils.sorting import apply_multi_sort
from studio.errors import InvalidArgument

jobs_bp = Blueprint('jobs', __name__)
log = logging.getLogger(__name__)


def _get_job(job_id: int) -> Job:
    j = get_db().execute(select(Job).where(Job.id==job_id)).scalar_one_or_none()
    if not j:
        abort(404)
    return j


@jobs_bp.get('')
@require_roles()
def list_jobs():
    session = get_db()
    user = load_current_user()
    q = session.query(Job)
    if not role_allows(user.role, 'JOB.READ_ALL'):
        q = q.filter(Job.staff_id==user.id)
    filter_specs = {
        'search': {'op': search_filter(Job.description)},
        'service_id': {'coerce': int, 'op': lambda qu, v: qu.filter(Job.service_id==v)},
        'staff_id': {'coerce': int, 'op': lambda qu, v: qu.filter(Job.staff_id==v)},
        'vendor_id': {'coerce': int, 'op': lambda qu, v: qu.filter(Job.vendor_id==v)},
        'status': {'validate': lambda v: v in Job.ALL_STATUSES, 'op': lambda qu, v: qu.filter(Job.status==v)},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'created_at': Job.created_at,
        'updated_at': Job.updated_at,
        'job_due_date': Job.job_due_date,
        'amount': Job.amount,
        'status': Job.status,
        'id': Job.id
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Job.id, default=Job.created_at.desc())
    return respond_list(q, job_json)


@jobs_bp.get('/<int:job_id>')
@require_roles()
def get_job(job_id: int):
    j = _get_job(job_id)
    assert_can_view_job(j)
    return respond_single(job_json(j), j.updated_at)


@jobs_bp.post('')
@require_roles(action='JOB.CREATE')
@audit_log('JOB.CREATE', entity='Job', entity_id_key='id', meta_keys=['service_id', 'staff_id', 'amount', 'commission_amount'])
def create_job():
    j = create_job_record(request.json or {}, int(get_jwt_identity()))
    return job_json(j), 201


@jobs_bp.put('/<int:job_id>')
@require_roles(action='JOB.EDIT')
@audit_log('JOB.UPDATE', entity='Job', entity_id_key='id', diff_keys=['service_id', 'staff_id', 'amount', 'commission_percentage', 'status'], pre_fetch=lambda a, kw: _prefetch_job(kw.get('job_id')))
def update_job(job_id: int):
    j = _get_job(job_id)
    j, warnings = edit_job(j, request.json or {})
    body = job_json(j)
    body['warnings'] = warnings
    return body


@jobs_bp.post('/<int:job_id>/status')
@require_roles()
@audit_log('JOB.STATUS', entity='Job', entity_id_key='id', diff_keys=['status'], pre_fetch=lambda a, kw: _prefetch_job(kw.get('job_id')), meta_keys=['status'])
def update_status(job_id: int):
    session = get_db()
    j = _get_job(job_id)
    assert_can_transition_job(j)
    data = request.json or {}
    target = data.get('status')
    if not target:
        raise InvalidArgument('status required')
    previous = j.status
    apply_status_transition(j, target)
    session.commit()
    log.info('job %s moved %s -> %s', j.id, previous, j.status)
    return job_json(j)


@jobs_bp.delete('/<int:job_id>')
@require_roles(action='JOB.DELETE')
@audit_log('JOB.DELETE', entity='Job', entity_id_arg='job_id')
def delete_job(job_id: int):
    session = get_db()
    j = _get_job(job_id)
    session.delete(j)
    session.commit()
    return {'status': 'deleted', 'id': job_id}


def _prefetch_job(job_id: int):
    j = get_db().execute(select(Job).where(Job.id==job_id)).scalar_one_or_none()
    if not j:
        return {}
    return {k: v for k, v in job_json(j).items() if k in ('service_id', 'staff_id', 'amount', 'commission_percentage', 'status')}
