from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select
from studio import get_db
from studio.models.authz import User
from studio.models.staff_service_config import StaffServiceConfig
from studio.services.commission import money_str


@dataclass(frozen=True)
class EligibleStaff:
    staff_id: int
    name: str
    default_percentage: Decimal
    default_due_date_offset: Optional[int] = None

    def to_json(self):
        return {
            'staff_id': self.staff_id,
            'name': self.name,
            'default_percentage': money_str(self.default_percentage),
            'default_due_date_offset': self.default_due_date_offset,
        }


def eligible_staff_for_service(service_id: Optional[int], session=None) -> List[EligibleStaff]:
    """Staff with a configured commission rate for ``service_id``, sorted by name.

    No service selected (None) yields an empty list.
    """
    if service_id is None:
        return []
    session = session or get_db()
    rows = session.execute(
        select(StaffServiceConfig, User)
        .join(User, User.id == StaffServiceConfig.staff_id)
        .where(StaffServiceConfig.service_id == service_id)
        .order_by(User.name.asc(), User.id.asc())
    ).all()
    return [
        EligibleStaff(
            staff_id=user.id,
            name=user.name,
            default_percentage=Decimal(cfg.percentage),
            default_due_date_offset=cfg.due_date_offset,
        )
        for cfg, user in rows
    ]


def find_config(staff_id: int, service_id: int, session=None) -> Optional[StaffServiceConfig]:
    session = session or get_db()
    return session.execute(
        select(StaffServiceConfig).where(
            StaffServiceConfig.staff_id == staff_id,
            StaffServiceConfig.service_id == service_id,
        )
    ).scalars().first()


def default_due_date(offset_days: Optional[int], now: Optional[datetime] = None) -> Optional[datetime]:
    if offset_days is None:
        return None
    now = now or datetime.now(timezone.utc)
    return now + timedelta(days=offset_days)


__all__ = ['EligibleStaff', 'eligible_staff_for_service', 'find_config', 'default_due_date']
