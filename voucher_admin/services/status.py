from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from voucher_admin.models.enums import VoucherStatus


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def as_date(value: date | datetime) -> date:
    """Calendar day of a date or datetime, read in UTC for aware datetimes."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def resolve_voucher_status(voucher: Any, today: date | datetime | None = None) -> VoucherStatus:
    """Classify a voucher as active, inactive or expired.

    Deactivation wins over expiry. Expiry is compared by UTC calendar day and
    is exclusive, so a voucher expiring today is still active.
    """
    if not voucher.is_active:
        return VoucherStatus.INACTIVE

    reference = as_date(today) if today is not None else today_utc()
    if voucher.expiry_date is not None and as_date(voucher.expiry_date) < reference:
        return VoucherStatus.EXPIRED

    return VoucherStatus.ACTIVE
