from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from voucher_admin.models import DiscountType, VoucherStatus
from voucher_admin.services.listing import (
    SortDirection,
    SortKey,
    SortState,
    VoucherListView,
    format_amount,
    search_vouchers,
    sort_vouchers,
)

TODAY = date(2026, 3, 15)


def _voucher(voucher_id, code, amount, discount_type=DiscountType.PERCENTAGE, expiry=None, is_active=True):
    return SimpleNamespace(
        id=voucher_id,
        code=code,
        discount_amount=amount,
        discount_type=discount_type,
        expiry_date=expiry,
        is_active=is_active,
    )


@pytest.fixture()
def vouchers():
    return [
        _voucher("a", "SAVE50", 20, expiry=datetime(2026, 6, 1)),
        _voucher("b", "flat", 50, DiscountType.FIXED),
        _voucher("c", "OLD", 100, expiry=datetime(2026, 1, 1)),
        _voucher("d", "OFF", 10, DiscountType.FIXED, is_active=False),
    ]


def test_format_amount_matches_plain_decimal_form():
    assert format_amount(50.0) == "50"
    assert format_amount(12.5) == "12.5"


def test_search_matches_amount_and_code(vouchers):
    matched = search_vouchers(vouchers, "50")
    assert [v.id for v in matched] == ["a", "b"]


def test_search_is_case_insensitive_and_checks_type(vouchers):
    assert [v.id for v in search_vouchers(vouchers, "FLAT")] == ["b"]
    assert [v.id for v in search_vouchers(vouchers, "Fix")] == ["b", "d"]
    assert len(search_vouchers(vouchers, "")) == 4


def test_status_and_type_filters(vouchers):
    view = VoucherListView(status_filter=VoucherStatus.EXPIRED)
    assert [v.id for v in view.apply(vouchers, TODAY)] == ["c"]

    view = VoucherListView(status_filter="inactive")
    assert [v.id for v in view.apply(vouchers, TODAY)] == ["d"]

    view = VoucherListView(status_filter="active", type_filter=DiscountType.FIXED)
    assert [v.id for v in view.apply(vouchers, TODAY)] == ["b"]


def test_sort_by_amount_ascending_then_descending():
    rows = [_voucher("x", "X", 50), _voucher("y", "Y", 10), _voucher("z", "Z", 100)]
    view = VoucherListView()

    view.request_sort(SortKey.DISCOUNT_AMOUNT)
    assert [v.discount_amount for v in view.apply(rows, TODAY)] == [10, 50, 100]

    view.request_sort(SortKey.DISCOUNT_AMOUNT)
    assert [v.discount_amount for v in view.apply(rows, TODAY)] == [100, 50, 10]


def test_sort_state_machine():
    view = VoucherListView()
    assert view.sort is None

    assert view.request_sort("code") == SortState(SortKey.CODE, SortDirection.ASC)
    assert view.request_sort("code") == SortState(SortKey.CODE, SortDirection.DESC)
    assert view.request_sort("code") == SortState(SortKey.CODE, SortDirection.ASC)
    view.request_sort("code")
    assert view.request_sort("status") == SortState(SortKey.STATUS, SortDirection.ASC)


def test_sort_code_is_case_insensitive(vouchers):
    rows = sort_vouchers(vouchers, SortState(SortKey.CODE))
    assert [v.code for v in rows] == ["flat", "OFF", "OLD", "SAVE50"]


def test_sort_expiry_puts_missing_first(vouchers):
    rows = sort_vouchers(vouchers, SortState(SortKey.EXPIRY_DATE))
    assert [v.id for v in rows] == ["b", "d", "c", "a"]

    rows = sort_vouchers(vouchers, SortState(SortKey.EXPIRY_DATE, SortDirection.DESC))
    assert [v.id for v in rows] == ["a", "c", "b", "d"]


def test_sort_status_is_lexical(vouchers):
    rows = sort_vouchers(vouchers, SortState(SortKey.STATUS), TODAY)
    assert [v.id for v in rows] == ["a", "b", "c", "d"]

    rows = sort_vouchers(vouchers, SortState(SortKey.STATUS, SortDirection.DESC), TODAY)
    assert [v.id for v in rows] == ["d", "c", "a", "b"]


def test_pipeline_searches_before_sorting(vouchers):
    view = VoucherListView(search_term="o", sort=SortState(SortKey.DISCOUNT_AMOUNT, SortDirection.DESC))
    assert [v.id for v in view.apply(vouchers, TODAY)] == ["c", "d"]


def test_select_all_tracks_visible_rows(vouchers):
    view = VoucherListView(type_filter="fixed")
    visible = view.apply(vouchers, TODAY)

    assert view.select_all(visible) == {"b", "d"}
    assert view.is_all_selected(visible)

    view.type_filter = "all"
    view.apply(vouchers, TODAY)
    assert view.selected == {"b", "d"}

    view.type_filter = "fixed"
    view.select_all(view.apply(vouchers, TODAY))
    assert view.selected == set()


def test_select_all_replaces_partial_selection(vouchers):
    view = VoucherListView()
    view.toggle("a")
    view.toggle("z")
    visible = view.apply(vouchers, TODAY)
    assert not view.is_all_selected(visible)

    assert view.select_all(visible) == {"a", "b", "c", "d"}


def test_toggle_and_deselect():
    view = VoucherListView()
    view.toggle("a")
    view.toggle("b")
    view.toggle("a")
    assert view.selected == {"b"}
    view.deselect("b")
    view.deselect("missing")
    assert view.selected == set()
    assert not view.is_all_selected([])
