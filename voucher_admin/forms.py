from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, NoReturn

import structlog

from voucher_admin.client import VoucherApiClient, VoucherApiError, VoucherConflictError
from voucher_admin.models.enums import DiscountType
from voucher_admin.schemas.voucher import MAX_PERCENTAGE, VoucherResponse
from voucher_admin.services.listing import format_amount
from voucher_admin.services.status import as_date, today_utc

logger = structlog.get_logger(__name__)

CODE_IN_USE_MESSAGE = "This voucher code is already in use. Please use a different code."


class VoucherValidationError(ValueError):
    pass


@dataclass
class VoucherForm:
    """Create/edit form state for a single voucher.

    Inputs are kept as the raw text a user typed. Local validation runs before
    any request is sent; a duplicate code reported by the API lands on
    ``code_error`` while every other failure lands on ``validation_error``.
    """

    code: str = ""
    discount_amount: str = ""
    discount_type: DiscountType | str = DiscountType.PERCENTAGE
    expiry_date: str = ""
    is_active: bool = True
    is_submitting: bool = False
    validation_error: str | None = None
    code_error: str | None = None

    @classmethod
    def from_voucher(cls, voucher: VoucherResponse) -> "VoucherForm":
        expiry = as_date(voucher.expiry_date).isoformat() if voucher.expiry_date else ""
        return cls(
            code=voucher.code,
            discount_amount=format_amount(voucher.discount_amount),
            discount_type=DiscountType(voucher.discount_type),
            expiry_date=expiry,
            is_active=voucher.is_active,
        )

    def _fail(self, message: str) -> NoReturn:
        self.validation_error = message
        raise VoucherValidationError(message)

    def validate(self, today: date | datetime | None = None, *, creating: bool = True) -> float:
        self.validation_error = None
        self.code_error = None

        if not self.code.strip():
            self._fail("Voucher code cannot be empty.")

        try:
            amount = float(self.discount_amount)
        except (TypeError, ValueError):
            amount = math.nan
        if not math.isfinite(amount) or amount <= 0:
            self._fail("Discount amount must be a positive number.")

        if DiscountType(self.discount_type) == DiscountType.PERCENTAGE and amount > MAX_PERCENTAGE:
            self._fail("Percentage discount cannot be more than 100%.")

        # Only new vouchers are held to a future expiry; edits may keep a past one.
        if creating and self.expiry_date:
            try:
                expiry = date.fromisoformat(self.expiry_date)
            except ValueError:
                self._fail("Expiry date is not a valid date.")
            reference = as_date(today) if today is not None else today_utc()
            if expiry < reference:
                self._fail("Expiry date cannot be in the past.")

        return amount

    def payload(self, amount: float) -> dict[str, Any]:
        return {
            "code": self.code.strip().upper(),
            "discountAmount": amount,
            "discountType": DiscountType(self.discount_type).value,
            "expiryDate": self.expiry_date or None,
            "isActive": self.is_active,
        }

    def submit_create(
        self,
        client: VoucherApiClient,
        today: date | datetime | None = None,
    ) -> VoucherResponse | None:
        amount = self.validate(today, creating=True)
        return self._submit(lambda: client.create_voucher(self.payload(amount)))

    def submit_update(
        self,
        client: VoucherApiClient,
        voucher_id: str,
        today: date | datetime | None = None,
    ) -> VoucherResponse | None:
        amount = self.validate(today, creating=False)
        return self._submit(lambda: client.update_voucher(voucher_id, self.payload(amount)))

    def _submit(self, send: Callable[[], VoucherResponse]) -> VoucherResponse | None:
        if self.is_submitting:
            return None
        self.is_submitting = True
        try:
            voucher = send()
        except VoucherConflictError:
            self.code_error = CODE_IN_USE_MESSAGE
            raise
        except VoucherApiError as exc:
            self.validation_error = str(exc)
            raise
        finally:
            self.is_submitting = False
        logger.info("voucher_form_submitted", voucher_id=str(voucher.id), code=voucher.code)
        return voucher
