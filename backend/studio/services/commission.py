"""Commission arithmetic and job money/time helpers.

All money is handled as ``Decimal``; floats are converted through ``str`` so
``0.1`` stays ``0.1`` rather than its binary approximation. Amounts and
rates are rounded to cents with ``round_money`` before a commission is
derived from them, so the stored commission matches the stored inputs
exactly.
"""
from __future__ import annotations
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from studio.errors import InvalidArgument

Number = Union[int, float, str, Decimal]

HUNDRED = Decimal('100')
MINOR_UNIT = Decimal('0.01')

CURRENCY_SYMBOLS = {'INR': '₹', 'USD': '$', 'EUR': '€', 'GBP': '£'}


def to_decimal(value: Number, field_name: str = 'value') -> Decimal:
    if isinstance(value, bool):
        raise InvalidArgument(f'{field_name} must be a number')
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidArgument(f'{field_name} must be a number')
    if not result.is_finite():
        raise InvalidArgument(f'{field_name} must be a finite number')
    return result


def validate_amount(amount: Number) -> Decimal:
    value = to_decimal(amount, 'amount')
    if value < 0:
        raise InvalidArgument('amount must be >= 0')
    return value


def validate_percentage(percentage: Number) -> Decimal:
    value = to_decimal(percentage, 'percentage')
    if value < 0 or value > HUNDRED:
        raise InvalidArgument('percentage must be between 0 and 100')
    return value


def compute_commission(amount: Number, percentage: Number) -> Decimal:
    """Return ``amount * percentage / 100``.

    Raises InvalidArgument for a negative amount or a percentage outside
    [0, 100].
    """
    return validate_amount(amount) * validate_percentage(percentage) / HUNDRED


def round_money(value: Number) -> Decimal:
    return to_decimal(value).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


def money_str(value: Optional[Number]) -> Optional[str]:
    if value is None:
        return None
    return str(round_money(value))


def _aware(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything stored is UTC
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def calculate_working_time(started_at: Optional[datetime], completed_at: Optional[datetime]) -> Optional[float]:
    """Hours between start and completion rounded to 2 decimals, or None."""
    if not started_at or not completed_at:
        return None
    seconds = (_aware(completed_at) - _aware(started_at)).total_seconds()
    return round(seconds / 3600, 2)


def format_working_time(started_at: Optional[datetime], completed_at: Optional[datetime]) -> str:
    hours = calculate_working_time(started_at, completed_at)
    if hours is None:
        return 'Not started'
    whole = int(hours)
    minutes = round((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    if whole == 0:
        return f'{minutes}m'
    if minutes == 0:
        return f'{whole}h'
    return f'{whole}h {minutes}m'


def is_job_overdue(due_date: Optional[datetime], status: str, now: Optional[datetime] = None) -> bool:
    if status == 'COMPLETED' or due_date is None:
        return False
    now = now or datetime.now(timezone.utc)
    return _aware(now) > _aware(due_date)


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    parts = []
    while len(head) > 2:
        parts.insert(0, head[-2:])
        head = head[:-2]
    if head:
        parts.insert(0, head)
    return ','.join(parts + [tail])


def format_currency(amount: Number, currency: str = 'INR') -> str:
    """Whole-unit display string, e.g. ``₹1,00,000`` for INR."""
    value = to_decimal(amount, 'amount').quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    sign = '-' if value < 0 else ''
    digits = str(abs(value))
    if currency == 'INR':
        grouped = _group_indian(digits)
    else:
        grouped = f'{int(digits):,}'
    symbol = CURRENCY_SYMBOLS.get(currency, f'{currency} ')
    return f'{sign}{symbol}{grouped}'


__all__ = [
    'compute_commission', 'validate_amount', 'validate_percentage', 'to_decimal', 'round_money', 'money_str',
    'calculate_working_time', 'format_working_time', 'is_job_overdue', 'format_currency',
]
