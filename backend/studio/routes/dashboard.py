from __future__ import annotations
from decimal import Decimal
from flask import Blueprint, current_app
from sqlalchemy import select, func
from studio import get_db
from studio.models.authz import User
from studio.models.job import Job
from studio.decorators.auth import require_roles
from studio.services.commission import money_str, format_currency
from studio.services.jobs import job_json
from studio.services.policy import load_current_user, role_allows

dashboard_bp = Blueprint('dashboard', __name__)

RECENT_JOBS_LIMIT = 5


@dashboard_bp.get('/stats')
@require_roles()
def stats():
    """Headline numbers for the landing screen.

    Staff (USER) only see their own jobs; ADMIN additionally gets the user
    count.
    """
    session = get_db()
    user = load_current_user()
    scoped = not role_allows(user.role, 'JOB.READ_ALL')

    counts = select(Job.status, func.count(Job.id), func.coalesce(func.sum(Job.commission_amount), 0)).group_by(Job.status)
    recent = select(Job).order_by(Job.created_at.desc(), Job.id.desc()).limit(RECENT_JOBS_LIMIT)
    if scoped:
        counts = counts.where(Job.staff_id==user.id)
        recent = recent.where(Job.staff_id==user.id)

    by_status = {}
    total_commission = Decimal('0')
    for status, count, commission in session.execute(counts).all():
        by_status[status] = count
        total_commission += Decimal(str(commission))

    body = {
        'total_jobs': sum(by_status.values()),
        'pending': by_status.get(Job.STATUS_PENDING, 0),
        'in_progress': by_status.get(Job.STATUS_IN_PROGRESS, 0),
        'completed': by_status.get(Job.STATUS_COMPLETED, 0),
        'total_commission': money_str(total_commission),
        'total_commission_display': format_currency(total_commission, current_app.config.get('CURRENCY_CODE', 'INR')),
        'recent_jobs': [job_json(j) for j in session.execute(recent).scalars().all()],
    }
    if user.is_admin:
        body['total_users'] = session.execute(select(func.count(User.id))).scalar_one()
    return body
