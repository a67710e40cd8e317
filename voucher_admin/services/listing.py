from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

from voucher_admin.models.enums import DiscountType, VoucherStatus
from voucher_admin.services.status import resolve_voucher_status

ALL = "all"


class SortKey(str, Enum):
    CODE = "code"
    DISCOUNT_AMOUNT = "discountAmount"
    DISCOUNT_TYPE = "discountType"
    EXPIRY_DATE = "expiryDate"
    STATUS = "status"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortState:
    key: SortKey
    direction: SortDirection = SortDirection.ASC


def voucher_id(voucher: Any) -> str:
    return str(voucher.id)


def format_amount(amount: float) -> str:
    value = float(amount)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _enum_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _expiry_key(voucher: Any) -> tuple[int, float]:
    expiry = voucher.expiry_date
    if expiry is None:
        return (0, 0.0)
    if not isinstance(expiry, datetime):
        expiry = datetime.combine(expiry, time.min)
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return (1, expiry.timestamp())


def search_vouchers(vouchers: Iterable[Any], term: str | None) -> list[Any]:
    if not term:
        return list(vouchers)
    needle = term.lower()
    return [
        voucher
        for voucher in vouchers
        if needle in voucher.code.lower()
        or needle in _enum_value(voucher.discount_type).lower()
        or needle in format_amount(voucher.discount_amount)
    ]


def filter_by_status(
    vouchers: Iterable[Any],
    status: VoucherStatus | str,
    today: date | datetime | None = None,
) -> list[Any]:
    if status == ALL:
        return list(vouchers)
    wanted = VoucherStatus(status)
    return [voucher for voucher in vouchers if resolve_voucher_status(voucher, today) == wanted]


def filter_by_type(vouchers: Iterable[Any], discount_type: DiscountType | str) -> list[Any]:
    if discount_type == ALL:
        return list(vouchers)
    wanted = DiscountType(discount_type)
    return [voucher for voucher in vouchers if DiscountType(voucher.discount_type) == wanted]


def _sort_key(key: SortKey, today: date | datetime | None) -> Callable[[Any], Any]:
    if key == SortKey.CODE:
        return lambda voucher: voucher.code.lower()
    if key == SortKey.DISCOUNT_TYPE:
        return lambda voucher: _enum_value(voucher.discount_type).lower()
    if key == SortKey.DISCOUNT_AMOUNT:
        return lambda voucher: float(voucher.discount_amount)
    if key == SortKey.EXPIRY_DATE:
        return _expiry_key
    return lambda voucher: resolve_voucher_status(voucher, today).value


def sort_vouchers(
    vouchers: Iterable[Any],
    sort: SortState | None,
    today: date | datetime | None = None,
) -> list[Any]:
    if sort is None:
        return list(vouchers)
    # sorted() stays stable with reverse=True, equal rows keep their order.
    return sorted(
        vouchers,
        key=_sort_key(SortKey(sort.key), today),
        reverse=SortDirection(sort.direction) == SortDirection.DESC,
    )


@dataclass
class VoucherListView:
    """Transient view state for the voucher list.

    The visible rows are always re-derived from the full collection: search,
    then status filter, then type filter, then sort. Selection is tracked
    separately and is never pruned when filters change, so hidden rows can
    stay selected.
    """

    search_term: str = ""
    status_filter: VoucherStatus | str = ALL
    type_filter: DiscountType | str = ALL
    sort: SortState | None = None
    selected: set[str] = field(default_factory=set)

    def apply(self, vouchers: Iterable[Any], today: date | datetime | None = None) -> list[Any]:
        rows = search_vouchers(vouchers, self.search_term)
        rows = filter_by_status(rows, self.status_filter, today)
        rows = filter_by_type(rows, self.type_filter)
        return sort_vouchers(rows, self.sort, today)

    def request_sort(self, key: SortKey | str) -> SortState:
        key = SortKey(key)
        direction = SortDirection.ASC
        if self.sort is not None and self.sort.key == key and self.sort.direction == SortDirection.ASC:
            direction = SortDirection.DESC
        self.sort = SortState(key=key, direction=direction)
        return self.sort

    def toggle(self, voucher_id: str) -> None:
        if voucher_id in self.selected:
            self.selected.discard(voucher_id)
        else:
            self.selected.add(voucher_id)

    def deselect(self, voucher_id: str) -> None:
        self.selected.discard(voucher_id)

    def clear_selection(self) -> None:
        self.selected = set()

    def is_all_selected(self, visible: Sequence[Any]) -> bool:
        if not visible:
            return False
        return all(voucher_id(voucher) in self.selected for voucher in visible)

    def select_all(self, visible: Sequence[Any]) -> set[str]:
        if self.is_all_selected(visible):
            self.selected = set()
        else:
            self.selected = {voucher_id(voucher) for voucher in visible}
        return self.selected
