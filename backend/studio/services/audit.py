from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity
from studio import get_db
from studio.models.audit import AuditLog
from studio.models.authz import User


def _actor() -> Optional[int]:
    try:
        ident = get_jwt_identity()
    except RuntimeError:
        return None  # no JWT context (scripts, saga compensation outside a request)
    try:
        return int(ident) if ident is not None else None
    except (TypeError, ValueError):
        return None


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[Any] = None, meta: Optional[Dict[str, Any]] = None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      action: short action code e.g. JOB.CREATE, JOB.STATUS, USER.UPDATE
      entity: optional entity name (Job, Vendor, User, ...)
      entity_id: optional primary key
      meta: additional JSON-safe dictionary (will be shallow copied)
    """
    session = get_db()
    actor = _actor()
    role = None
    if actor is not None:
        user = session.get(User, actor)
        role = user.role if user else None
    log = AuditLog(
        actor_user_id=actor or 0,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        role_snapshot=role,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
