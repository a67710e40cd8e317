from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from voucher_admin.models.enums import DiscountType, VoucherStatus

MAX_PERCENTAGE = 100


def _parse_expiry(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if len(value) == 10:
            value = date.fromisoformat(value)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VoucherCreateRequest(_WireModel):
    code: str = Field(min_length=1, max_length=64)
    discount_amount: float = Field(gt=0)
    discount_type: DiscountType
    expiry_date: datetime | None = None
    is_active: bool = True

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("expiry_date", mode="before")
    @classmethod
    def parse_expiry(cls, value: Any) -> Any:
        return _parse_expiry(value)

    @model_validator(mode="after")
    def check_percentage(self) -> "VoucherCreateRequest":
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_amount > MAX_PERCENTAGE:
            raise ValueError("Percentage discount cannot be more than 100%.")
        return self


class VoucherUpdateRequest(_WireModel):
    code: str | None = Field(default=None, min_length=1, max_length=64)
    discount_amount: float | None = Field(default=None, gt=0)
    discount_type: DiscountType | None = None
    expiry_date: datetime | None = None
    is_active: bool | None = None

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("expiry_date", mode="before")
    @classmethod
    def parse_expiry(cls, value: Any) -> Any:
        return _parse_expiry(value)

    def changes(self) -> dict[str, Any]:
        # Absent fields are left alone; an explicit null only clears the expiry.
        updates = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in updates.items()
            if value is not None or key == "expiry_date"
        }


class VoucherResponse(_WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID
    code: str
    discount_amount: float
    discount_type: DiscountType
    expiry_date: datetime | None = None
    is_active: bool
    status: VoucherStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BulkDeleteRequest(_WireModel):
    ids: list[uuid.UUID] = Field(min_length=1)


class BulkDeleteFailure(_WireModel):
    id: str
    reason: str


class BulkDeleteResponse(_WireModel):
    succeeded: list[str] = Field(default_factory=list)
    failed: list[BulkDeleteFailure] = Field(default_factory=list)
