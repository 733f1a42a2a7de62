"""Privileged write endpoints kept at their dashboard paths.

Every handler re-verifies the caller's stored role server-side.
"""
from flask import Blueprint, request
from flask_jwt_extended import get_jwt_identity
from studio.decorators.auth import require_roles
from studio.decorators.audit import audit_log
from studio.models.authz import ROLE_ADMIN, ROLE_MANAGER
from studio.services import accounts
from studio.routes.vendors import create_vendor_record, vendor_json

admin_bp = Blueprint('admin', __name__)


@admin_bp.post('/create-user')
@require_roles(ROLE_ADMIN)
@audit_log('USER.CREATE', entity='User', entity_id_key='id', meta_keys=['role'])
def create_user():
    user = accounts.create_user(request.json or {})
    return {'id': user.id, 'role': user.role}, 201


@admin_bp.post('/update-user')
@require_roles(ROLE_ADMIN)
@audit_log('USER.UPDATE', entity='User', entity_id_key='id', meta_keys=['fields'])
def update_user():
    data = request.json or {}
    user = accounts.update_user(data)
    fields = sorted(k for k in ('name', 'email', 'mobile', 'role', 'password') if data.get(k) is not None)
    return {'success': True, 'message': 'User updated successfully', 'id': user.id, 'fields': fields}


@admin_bp.post('/create-vendor')
@require_roles(ROLE_ADMIN, ROLE_MANAGER)
@audit_log('VENDOR.CREATE', entity='Vendor', entity_id_key='id', meta_keys=['studio_name'])
def create_vendor():
    v = create_vendor_record(request.json or {}, int(get_jwt_identity()))
    return vendor_json(v), 201
