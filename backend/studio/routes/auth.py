from flask import Blueprint, request, abort
from flask_jwt_extended import create_access_token, jwt_required
from studio import get_db
from studio.models.authz import User
from studio.services.identity import get_identity_provider, call_provider
from studio.services.policy import load_current_user, visible_nav_items, normalize_role, current_role, can_access_route

auth_bp = Blueprint('auth', __name__)


def _profile_json(user: User):
    role = normalize_role(user.role)
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'mobile': user.mobile,
        'role': role,
        'nav': [item.to_json() for item in visible_nav_items(role)],
    }


@auth_bp.post('/login')
def login():
    data = request.json or {}
    email = (data.get('email') or '').strip().lower(); password = data.get('password')
    if not email or not password:
        abort(400, description='email & password required')
    user_id = call_provider(get_identity_provider().authenticate, email, password)
    if user_id is None:
        abort(401, description='invalid credentials')
    user = get_db().get(User, user_id)
    if user is None:
        # identity without a profile cannot use the dashboard
        abort(401, description='profile not found')
    # JWT identity must be a string (flask-jwt-extended v4 requirement).
    # The role claim is informational; authorization re-reads the profile.
    token = create_access_token(identity=str(user.id), additional_claims={'role': user.role})
    return {'access_token': token, 'role': normalize_role(user.role)}


@auth_bp.get('/me')
@jwt_required()
def me():
    user = load_current_user()
    if not user:
        abort(404)
    return _profile_json(user)


@auth_bp.get('/navigation')
@jwt_required()
def navigation():
    role = current_role()
    return {'role': role, 'nav': [item.to_json() for item in visible_nav_items(role)]}


@auth_bp.get('/can-access')
@jwt_required()
def can_access():
    """Advisory check for a dashboard screen; API writes are gated separately."""
    route = request.args.get('route')
    if not route:
        abort(400, description='route required')
    role = current_role()
    return {'route': route, 'role': role, 'allowed': can_access_route(role, route)}
