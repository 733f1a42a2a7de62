"""Staff account workflows spanning the identity provider and profile rows.

Account creation is a two-step saga: the provider creates the identity, then
the profile (and any commission configs) is inserted. If the second step
fails the identity is deleted again before the error is raised, so no
orphaned login remains.

Provider calls always happen while the local session has nothing pending.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError

from studio import get_db
from studio.errors import InvalidArgument, UpstreamError, ConflictError
from studio.models.authz import User, ROLE_USER, coerce_role, ALL_ROLES
from studio.models.service import Service
from studio.models.staff_service_config import StaffServiceConfig
from studio.models.job import Job
from studio.services.identity import get_identity_provider, call_provider
from studio.services.commission import validate_percentage, round_money
from studio.utils.validation import validate_email, validate_mobile, require_text

log = logging.getLogger(__name__)


def parse_commission_configs(items: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Validate ``[{service_id, percentage, due_date_offset?}]`` rows.

    Rows without a service are skipped, as the staff form submits blank rows.
    """
    session = get_db()
    out: List[Dict[str, Any]] = []
    seen = set()
    for raw in items or []:
        if not isinstance(raw, dict):
            raise InvalidArgument('commissions must be a list of objects')
        service_id = raw.get('service_id')
        if service_id in (None, ''):
            continue
        try:
            service_id = int(service_id)
        except (TypeError, ValueError):
            raise InvalidArgument('service_id must be int')
        if service_id in seen:
            raise InvalidArgument(f'duplicate commission for service {service_id}')
        seen.add(service_id)
        if session.get(Service, service_id) is None:
            raise InvalidArgument(f'unknown service {service_id}')
        percentage = round_money(validate_percentage(raw.get('percentage', 0)))
        offset = raw.get('due_date_offset')
        if offset in ('', None):
            offset = None
        else:
            try:
                offset = int(offset)
            except (TypeError, ValueError):
                raise InvalidArgument('due_date_offset must be int')
            if offset < 0:
                raise InvalidArgument('due_date_offset must be >= 0')
        out.append({'service_id': service_id, 'percentage': percentage, 'due_date_offset': offset})
    return out


def _insert_profile(user_id: int, email: str, name: str, role: str, mobile: Optional[str], configs: List[Dict[str, Any]]):
    session = get_db()
    user = User(id=user_id, email=email, name=name, role=role, mobile=mobile)
    session.add(user)
    for cfg in configs:
        session.add(StaffServiceConfig(staff_id=user_id, **cfg))
    session.commit()
    return user


def create_user(data: Dict[str, Any]) -> User:
    email = validate_email(data.get('email'))
    password = data.get('password')
    if not password or len(str(password)) < 6:
        raise InvalidArgument('password must be at least 6 characters')
    name = require_text(data.get('name'), 'name')
    mobile = validate_mobile(data.get('mobile'), required=False)
    role = coerce_role(data.get('role'))
    configs = parse_commission_configs(data.get('commissions')) if role == ROLE_USER else []

    session = get_db()
    if session.execute(select(User).where(User.email==email)).scalar_one_or_none():
        raise ConflictError('email already in use')
    session.rollback()  # release the read transaction before the provider writes

    provider = get_identity_provider()
    identity_id = call_provider(provider.create_identity, email, str(password))
    try:
        user = _insert_profile(identity_id, email, name, role, mobile, configs)
    except SQLAlchemyError as e:
        session.rollback()
        log.error('profile insert failed for identity %s; compensating', identity_id)
        try:
            provider.delete_identity(identity_id)
        except Exception:
            log.exception('compensating delete failed for identity %s', identity_id)
        raise UpstreamError('Failed to create user profile') from e
    log.info('user %s created with role %s', user.id, role)
    return user


def update_user(data: Dict[str, Any]) -> User:
    user_id = data.get('id')
    if user_id in (None, ''):
        raise InvalidArgument('User ID is required')
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise InvalidArgument('id must be int')
    session = get_db()
    user = session.get(User, user_id)
    if user is None:
        from flask import abort
        abort(404, description='User not found')

    email = validate_email(data['email']) if data.get('email') is not None else None
    if email and email != user.email:
        if session.execute(select(User).where(User.email==email, User.id!=user.id)).scalar_one_or_none():
            raise ConflictError('email already in use')
    name = require_text(data['name'], 'name') if 'name' in data and data['name'] is not None else None
    mobile = validate_mobile(data['mobile'], required=False) if 'mobile' in data else None
    role = data.get('role')
    if role is not None and role not in ALL_ROLES:
        raise InvalidArgument(f'role must be one of {", ".join(ALL_ROLES)}')
    password = data.get('password') or None
    if password is not None and len(str(password)) < 6:
        raise InvalidArgument('password must be at least 6 characters')
    email_changed = email is not None and email != user.email
    session.rollback()

    if password or email_changed:
        provider = get_identity_provider()
        call_provider(provider.update_identity, user.id, email=email, password=password)

    user = session.get(User, user_id)
    if email is not None:
        user.email = email
    if name is not None:
        user.name = name
    if 'mobile' in data:
        user.mobile = mobile
    if role is not None:
        user.role = role
    user.updated_at = datetime.now(timezone.utc)
    session.commit()
    return user


def replace_service_configs(user: User, items) -> List[StaffServiceConfig]:
    """Swap all commission configs of ``user`` for ``items``.

    Existing jobs keep their snapshotted commission.
    """
    configs = parse_commission_configs(items)
    session = get_db()
    session.execute(delete(StaffServiceConfig).where(StaffServiceConfig.staff_id==user.id))
    rows = [StaffServiceConfig(staff_id=user.id, **cfg) for cfg in configs]
    session.add_all(rows)
    user.updated_at = datetime.now(timezone.utc)
    session.commit()
    session.expire(user, ['service_configs'])
    return rows


def delete_staff(user: User) -> None:
    """Remove the login first, then the profile.

    A provider failure leaves both in place. If the profile delete fails
    afterwards the account can no longer sign in and a retry finishes the
    job, since deleting a missing identity is a no-op.
    """
    session = get_db()
    if session.execute(select(Job.id).where(Job.staff_id==user.id).limit(1)).first():
        raise ConflictError('staff member has jobs assigned')
    user_id = user.id
    session.rollback()  # release the read transaction before the provider writes
    call_provider(get_identity_provider().delete_identity, user_id)
    try:
        session.delete(session.get(User, user_id))
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        log.error('identity %s deleted but profile delete failed; retry the delete', user_id)
        raise


__all__ = ['create_user', 'update_user', 'replace_service_configs', 'delete_staff', 'parse_commission_configs']
