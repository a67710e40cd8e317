from __future__ import annotations

from datetime import date, datetime

import structlog

from voucher_admin.client import BulkDeleteResult, VoucherApiClient
from voucher_admin.schemas.voucher import VoucherResponse
from voucher_admin.services.listing import VoucherListView

logger = structlog.get_logger(__name__)


class EmptySelectionError(ValueError):
    pass


class VoucherDashboard:
    def __init__(self, client: VoucherApiClient, view: VoucherListView | None = None) -> None:
        self.client = client
        self.view = view or VoucherListView()
        self.vouchers: list[VoucherResponse] = []

    def refresh(self) -> list[VoucherResponse]:
        self.vouchers = self.client.list_vouchers()
        return self.vouchers

    def rows(self, today: date | datetime | None = None) -> list[VoucherResponse]:
        return self.view.apply(self.vouchers, today)

    def select_all(self, today: date | datetime | None = None) -> set[str]:
        return self.view.select_all(self.rows(today))

    def is_all_selected(self, today: date | datetime | None = None) -> bool:
        return self.view.is_all_selected(self.rows(today))

    def delete(self, voucher_id: str) -> None:
        self.client.delete_voucher(voucher_id)
        logger.info("voucher_deleted", voucher_id=voucher_id)
        self.view.deselect(voucher_id)
        self.refresh()

    def bulk_delete(self) -> BulkDeleteResult:
        if not self.view.selected:
            raise EmptySelectionError("Select at least one voucher to delete.")

        result = self.client.bulk_delete(sorted(self.view.selected))
        for voucher_id in result.succeeded:
            self.view.deselect(voucher_id)
        logger.info(
            "voucher_bulk_delete_finished",
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        self.refresh()
        return result
