from __future__ import annotations
from decimal import Decimal
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, Numeric, ForeignKey, DateTime, UniqueConstraint, func
from typing import Optional
from .authz import Base


class StaffServiceConfig(Base):
    """Default commission rate (and optional deadline offset in days) for a staff/service pair."""
    __tablename__ = 'staff_service_configs'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    staff_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    service_id: Mapped[int] = mapped_column(ForeignKey('services.id', ondelete='CASCADE'), nullable=False, index=True)
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    due_date_offset: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())

    staff = relationship('User', back_populates='service_configs')
    service = relationship('Service', back_populates='staff_configs')

    __table_args__ = (UniqueConstraint('staff_id', 'service_id', name='uq_staff_service'),)

__all__ = ["StaffServiceConfig"]
