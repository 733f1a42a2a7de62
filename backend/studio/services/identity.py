"""Identity provider seam.

Profiles (``users``) reference an identity owned by a provider that manages
credentials. The provider commits its own writes, independent of the caller's
session, the same way a hosted auth service would. ``LocalIdentityProvider``
keeps identities in the ``identities`` table through a dedicated session.
"""
from __future__ import annotations
import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.orm import Session

from studio.errors import UpstreamError
from studio.models.authz import Identity

log = logging.getLogger(__name__)


class IdentityError(Exception):
    """Raised by providers; message is safe to show to the caller."""


class IdentityProvider:
    name = 'base'

    def create_identity(self, email: str, password: str) -> int:
        raise NotImplementedError

    def update_identity(self, identity_id: int, *, email: Optional[str] = None, password: Optional[str] = None) -> None:
        raise NotImplementedError

    def delete_identity(self, identity_id: int) -> None:
        raise NotImplementedError

    def authenticate(self, email: str, password: str) -> Optional[int]:
        raise NotImplementedError


class LocalIdentityProvider(IdentityProvider):
    name = 'local'

    def _session(self) -> Session:
        import studio
        return Session(bind=studio.db_engine, expire_on_commit=False)

    def create_identity(self, email: str, password: str) -> int:
        with self._session() as session:
            if session.execute(select(Identity).where(Identity.email==email)).scalar_one_or_none():
                raise IdentityError('A user with this email address has already been registered')
            ident = Identity(email=email, password_hash='')
            ident.set_password(password)
            session.add(ident)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise IdentityError('A user with this email address has already been registered')
            log.info('identity %s created for %s', ident.id, email)
            return ident.id

    def update_identity(self, identity_id: int, *, email: Optional[str] = None, password: Optional[str] = None) -> None:
        with self._session() as session:
            ident = session.get(Identity, identity_id)
            if ident is None:
                raise IdentityError('User not found')
            if email and email != ident.email:
                taken = session.execute(
                    select(Identity).where(Identity.email==email, Identity.id!=identity_id)
                ).scalar_one_or_none()
                if taken:
                    raise IdentityError('A user with this email address has already been registered')
                ident.email = email
            if password:
                ident.set_password(password)
            session.commit()

    def delete_identity(self, identity_id: int) -> None:
        with self._session() as session:
            ident = session.get(Identity, identity_id)
            if ident is not None:
                session.delete(ident)
                session.commit()
                log.info('identity %s deleted', identity_id)

    def authenticate(self, email: str, password: str) -> Optional[int]:
        with self._session() as session:
            ident = session.execute(select(Identity).where(Identity.email==email)).scalar_one_or_none()
            if ident is None or not ident.verify_password(password):
                return None
            return ident.id


def get_identity_provider() -> IdentityProvider:
    from flask import current_app
    return current_app.extensions['identity_provider']


def call_provider(fn, *args, **kwargs):
    """Run a provider call and turn its failures into HTTP 500 upstream errors."""
    try:
        return fn(*args, **kwargs)
    except IdentityError as e:
        log.error('identity provider error: %s', e)
        raise UpstreamError(str(e))
    except SQLAlchemyError as e:
        log.exception('identity provider storage failure')
        raise UpstreamError(f'Identity provider unavailable: {e.__class__.__name__}')


__all__ = [
    'IdentityProvider', 'LocalIdentityProvider', 'IdentityError', 'get_identity_provider', 'call_provider',
]
