#!/usr/bin/env python
"""Idempotent bootstrap: schema, initial ADMIN account and optional services.

Usage:
    python backend/scripts/seed_admin.py                    # ensure admin account
    python backend/scripts/seed_admin.py --services Editing Colour
    python backend/scripts/seed_admin.py --show-users       # print profiles after seeding

Admin credentials come from SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD.
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from studio import create_app, get_db  # type: ignore
from studio.models.authz import Base, User, ROLE_ADMIN
from studio.models.service import Service
from studio.services.identity import get_identity_provider, IdentityError

DEFAULT_ADMIN_EMAIL = 'admin@example.com'
DEFAULT_ADMIN_PASSWORD = 'ChangeMe123!'


def ensure_schema(session):
    try:
        session.execute(text('SELECT 1 FROM users LIMIT 1'))
    except Exception:
        # bootstrap fallback; real environments run `alembic upgrade head`
        session.rollback()
        from studio.models import audit, service, vendor, staff_service_config, job  # noqa: F401
        Base.metadata.create_all(session.get_bind())
    finally:
        session.commit()


def ensure_initial_admin(session):
    email = os.getenv('SEED_ADMIN_EMAIL', DEFAULT_ADMIN_EMAIL).strip().lower()
    password = os.getenv('SEED_ADMIN_PASSWORD', DEFAULT_ADMIN_PASSWORD)
    existing = session.execute(select(User).where(User.email==email)).scalar_one_or_none()
    if existing:
        if existing.role != ROLE_ADMIN:
            existing.role = ROLE_ADMIN
            session.commit()
            print(f"[INFO] Promoted {email} to ADMIN.")
        return False
    session.rollback()
    try:
        identity_id = get_identity_provider().create_identity(email, password)
    except IdentityError as e:
        print(f"[ERROR] Could not create identity for {email}: {e}")
        return False
    session.add(User(id=identity_id, email=email, name='Administrator', role=ROLE_ADMIN))
    session.commit()
    print(f"[INFO] Created initial admin user {email} with temporary password.")
    return True


def ensure_services(session, names):
    existing = {s.name for s in session.execute(select(Service)).scalars().all()}
    created = 0
    for name in names:
        name = name.strip()
        if name and name not in existing:
            session.add(Service(name=name))
            existing.add(name)
            created += 1
    session.commit()
    return created


def print_users(session):
    rows = session.execute(select(User).order_by(User.role, User.name)).scalars().all()
    if not rows:
        print("[INFO] No users present.")
        return
    name_w = max(len(u.name) for u in rows)
    print(f"{'Name'.ljust(name_w)} | Role    | Email")
    print('-' * (name_w + 40))
    for u in rows:
        print(f"{u.name.ljust(name_w)} | {u.role.ljust(7)} | {u.email}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed the initial ADMIN account",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed admin: seed_admin.py\n  with services: seed_admin.py --services Editing Colour\n""")
    )
    p.add_argument('--services', nargs='*', default=[], metavar='NAME', help='Service names to create if missing')
    p.add_argument('--show-users', action='store_true', help='Print profiles after seeding')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        ensure_schema(session)
        ensure_initial_admin(session)
        created = ensure_services(session, args.services)
        print(f"[DONE] Services created: {created}")
        if args.show_users:
            print_users(session)
    return 0


if __name__ == '__main__':
    sys.exit(main())
