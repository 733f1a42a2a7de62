from __future__ import annotations
from sqlalchemy.orm import declarative_base, relationship, Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, func
from typing import Optional

Base = declarative_base()

ROLE_ADMIN = 'ADMIN'
ROLE_MANAGER = 'MANAGER'
ROLE_USER = 'USER'
ALL_ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_USER)


class Identity(Base):
    """Credential record owned by the identity provider.

    Profiles in ``users`` share the identity id. The provider commits these
    rows on its own, so they survive a rollback of the caller's session.
    """
    __tablename__ = 'identities'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def set_password(self, raw: str):
        from werkzeug.security import generate_password_hash
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        from werkzeug.security import check_password_hash
        return check_password_hash(self.password_hash, raw)


class User(Base):
    __tablename__ = 'users'
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    mobile: Mapped[Optional[str]] = mapped_column(String(32))
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER, index=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    service_configs = relationship('StaffServiceConfig', back_populates='staff', cascade='all, delete-orphan')

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def coerce_role(raw) -> str:
    """Map free-form input onto a stored role; anything unknown becomes USER."""
    if raw in (ROLE_ADMIN, ROLE_MANAGER):
        return raw
    return ROLE_USER
