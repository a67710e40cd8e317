from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from voucher_admin.models import VoucherStatus
from voucher_admin.services.status import as_date, resolve_voucher_status, today_utc

TODAY = date(2026, 3, 15)


def _voucher(is_active=True, expiry_date=None):
    return SimpleNamespace(is_active=is_active, expiry_date=expiry_date)


def test_inactive_wins_over_expiry():
    for expiry in (None, TODAY - timedelta(days=10), TODAY, TODAY + timedelta(days=10)):
        assert resolve_voucher_status(_voucher(False, expiry), TODAY) == VoucherStatus.INACTIVE


def test_active_without_expiry():
    assert resolve_voucher_status(_voucher(True, None), TODAY) == VoucherStatus.ACTIVE


def test_expiry_today_is_still_active():
    expiry = datetime(2026, 3, 15, 0, 0)
    assert resolve_voucher_status(_voucher(True, expiry), TODAY) == VoucherStatus.ACTIVE


def test_expiry_time_of_day_is_ignored():
    expiry = datetime(2026, 3, 15, 0, 1)
    now = datetime(2026, 3, 15, 23, 59)
    assert resolve_voucher_status(_voucher(True, expiry), now) == VoucherStatus.ACTIVE


def test_expiry_yesterday_is_expired():
    expiry = datetime(2026, 3, 14, 23, 59)
    assert resolve_voucher_status(_voucher(True, expiry), TODAY) == VoucherStatus.EXPIRED


def test_defaults_to_current_utc_date():
    today = today_utc()
    assert today == datetime.now(timezone.utc).date()
    assert resolve_voucher_status(_voucher(True, today - timedelta(days=1))) == VoucherStatus.EXPIRED
    assert resolve_voucher_status(_voucher(True, today)) == VoucherStatus.ACTIVE


def test_aware_expiry_is_read_as_utc_day():
    midnight_utc = datetime(2026, 3, 15, tzinfo=timezone.utc)
    new_york = midnight_utc.astimezone(ZoneInfo("America/New_York"))
    tokyo = midnight_utc.astimezone(ZoneInfo("Asia/Tokyo"))

    assert new_york.date() == date(2026, 3, 14)
    assert as_date(new_york) == TODAY
    assert as_date(tokyo) == TODAY
    assert resolve_voucher_status(_voucher(True, new_york), TODAY) == VoucherStatus.ACTIVE
    assert resolve_voucher_status(_voucher(True, midnight_utc), new_york) == VoucherStatus.ACTIVE
    assert resolve_voucher_status(_voucher(True, new_york), date(2026, 3, 16)) == VoucherStatus.EXPIRED
