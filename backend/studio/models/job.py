from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, Numeric, ForeignKey, DateTime, func
from typing import Optional
from .authz import Base


class Job(Base):
    __tablename__ = 'jobs'
    # Status constants
    STATUS_PENDING = 'PENDING'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_COMPLETED = 'COMPLETED'
    ALL_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    service_id: Mapped[int] = mapped_column(ForeignKey('services.id'), nullable=False, index=True)
    vendor_id: Mapped[Optional[int]] = mapped_column(ForeignKey('vendors.id', ondelete='SET NULL'), nullable=True, index=True)
    staff_id: Mapped[int] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default='')
    data_location: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    final_location: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    job_due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal('0'))
    # rate in force when the job was assigned; commission_amount is derived from it once
    commission_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal('0'))
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal('0'))
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=STATUS_PENDING, index=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    service = relationship('Service')
    vendor = relationship('Vendor')
    staff = relationship('User')

__all__ = ["Job"]
