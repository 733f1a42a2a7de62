"""Job assignment rules: eligibility, commission snapshot and edits."""
from __future__ import annotations
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from flask import current_app

from studio import get_db
from studio.errors import InvalidArgument
from studio.models.authz import User
from studio.models.job import Job
from studio.models.service import Service
from studio.models.vendor import Vendor
from studio.services.commission import (
    compute_commission, validate_amount, validate_percentage, money_str, round_money,
    calculate_working_time, format_working_time, is_job_overdue, format_currency,
)
from studio.services.eligibility import find_config, default_due_date
from studio.services.lifecycle import apply_status_transition, utcnow
from studio.utils.validation import parse_int, parse_datetime, optional_text, isoformat

log = logging.getLogger(__name__)


def _get_or_400(model, ident: int, label: str):
    obj = get_db().get(model, ident)
    if obj is None:
        raise InvalidArgument(f'unknown {label} {ident}')
    return obj


def create_job(data: Dict[str, Any], actor_id: Optional[int]) -> Job:
    service_id = parse_int(data.get('service_id'), 'service_id')
    staff_id = parse_int(data.get('staff_id'), 'staff_id')
    vendor_id = parse_int(data.get('vendor_id'), 'vendor_id', required=False)
    _get_or_400(Service, service_id, 'service')
    _get_or_400(User, staff_id, 'staff')
    if vendor_id is not None:
        _get_or_400(Vendor, vendor_id, 'vendor')

    config = find_config(staff_id, service_id)
    if config is None:
        raise InvalidArgument('staff member has no commission rate for this service')

    # cents, as stored; the commission must be derived from the stored values
    amount = round_money(validate_amount(data.get('amount', 0)))
    if data.get('commission_percentage') not in (None, ''):
        percentage = round_money(validate_percentage(data['commission_percentage']))
    else:
        percentage = round_money(config.percentage)

    if data.get('job_due_date'):
        due = parse_datetime(data['job_due_date'], 'job_due_date')
    else:
        due = default_due_date(config.due_date_offset)
        if due is None:
            raise InvalidArgument('job_due_date required')

    now = utcnow()
    job = Job(
        service_id=service_id,
        staff_id=staff_id,
        vendor_id=vendor_id,
        description=optional_text(data.get('description'), 'description') or '',
        data_location=optional_text(data.get('data_location'), 'data_location', 500),
        final_location=optional_text(data.get('final_location'), 'final_location', 500),
        job_due_date=due,
        amount=amount,
        commission_percentage=percentage,
        commission_amount=compute_commission(amount, percentage),
        status=Job.STATUS_PENDING,
        created_by=actor_id,
        created_at=now,
        updated_at=now,
    )
    session = get_db()
    session.add(job)
    session.commit()
    log.info('job %s created for staff %s (commission %s)', job.id, staff_id, job.commission_amount)
    return job


def edit_job(job: Job, data: Dict[str, Any]) -> Tuple[Job, List[str]]:
    """Apply an administrative edit and return (job, warnings).

    Changing the service keeps the assigned staff member even when they have
    no rate for the new service; a warning is returned instead and the
    previous percentage stays in force unless one is supplied.
    """
    warnings: List[str] = []
    service_id = job.service_id
    staff_id = job.staff_id
    if 'service_id' in data:
        service_id = parse_int(data['service_id'], 'service_id')
        _get_or_400(Service, service_id, 'service')
    if 'staff_id' in data:
        staff_id = parse_int(data['staff_id'], 'staff_id')
        _get_or_400(User, staff_id, 'staff')
    if 'vendor_id' in data:
        vendor_id = parse_int(data['vendor_id'], 'vendor_id', required=False)
        if vendor_id is not None:
            _get_or_400(Vendor, vendor_id, 'vendor')
        job.vendor_id = vendor_id

    stored_amount = Decimal(job.amount)
    stored_percentage = Decimal(job.commission_percentage)
    amount = round_money(validate_amount(data['amount'])) if 'amount' in data else stored_amount
    percentage = stored_percentage
    assignment_changed = service_id != job.service_id or staff_id != job.staff_id
    config = find_config(staff_id, service_id)
    if data.get('commission_percentage') not in (None, ''):
        percentage = round_money(validate_percentage(data['commission_percentage']))
    elif assignment_changed and config is not None:
        percentage = round_money(config.percentage)
    if config is None:
        warnings.append(f'staff {staff_id} has no commission rate configured for service {service_id}')

    for field, limit in (('description', 2000), ('data_location', 500), ('final_location', 500)):
        if field in data:
            value = optional_text(data[field], field, limit)
            if field == 'description':
                value = value or ''
            setattr(job, field, value)
    if data.get('job_due_date'):
        job.job_due_date = parse_datetime(data['job_due_date'], 'job_due_date')

    job.service_id = service_id
    job.staff_id = staff_id
    # the snapshot only moves when one of its inputs does
    if amount != stored_amount or percentage != stored_percentage:
        job.amount = amount
        job.commission_percentage = percentage
        job.commission_amount = compute_commission(amount, percentage)
    now = utcnow()
    if data.get('status'):
        apply_status_transition(job, data['status'], now)
    job.updated_at = now
    session = get_db()
    session.commit()
    # relationships still point at the previous service/staff/vendor rows
    session.expire(job, ['service', 'staff', 'vendor'])
    if warnings:
        log.warning('job %s edited with warnings: %s', job.id, '; '.join(warnings))
    return job, warnings


def job_json(j: Job) -> Dict[str, Any]:
    currency = current_app.config.get('CURRENCY_CODE', 'INR')
    return {
        'id': j.id,
        'service_id': j.service_id,
        'service_name': j.service.name if j.service else None,
        'vendor_id': j.vendor_id,
        'vendor_name': j.vendor.studio_name if j.vendor else None,
        'staff_id': j.staff_id,
        'staff_name': j.staff.name if j.staff else None,
        'description': j.description,
        'data_location': j.data_location,
        'final_location': j.final_location,
        'job_due_date': isoformat(j.job_due_date),
        'amount': money_str(j.amount),
        'commission_percentage': money_str(j.commission_percentage),
        'commission_amount': money_str(j.commission_amount),
        'amount_display': format_currency(j.amount, currency),
        'commission_display': format_currency(j.commission_amount, currency),
        'status': j.status,
        'started_at': isoformat(j.started_at),
        'completed_at': isoformat(j.completed_at),
        'working_hours': calculate_working_time(j.started_at, j.completed_at),
        'working_time': format_working_time(j.started_at, j.completed_at),
        'is_overdue': is_job_overdue(j.job_due_date, j.status),
        'created_at': isoformat(j.created_at),
        'updated_at': isoformat(j.updated_at),
    }


__all__ = ['create_job', 'edit_job', 'job_json']
