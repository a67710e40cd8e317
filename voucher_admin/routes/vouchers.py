from __future__ import annotations

import uuid
from datetime import date
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from voucher_admin.db import get_db
from voucher_admin.models import Voucher
from voucher_admin.schemas.voucher import (
    BulkDeleteFailure,
    BulkDeleteRequest,
    BulkDeleteResponse,
    VoucherCreateRequest,
    VoucherResponse,
    VoucherUpdateRequest,
)
from voucher_admin.services import vouchers as voucher_service
from voucher_admin.services.listing import ALL, SortDirection, SortKey, SortState, VoucherListView
from voucher_admin.services.status import resolve_voucher_status, today_utc

router = APIRouter()

_ERRORS = {
    voucher_service.NOT_FOUND: (404, {"code": "NOT_FOUND", "message": "Voucher not found."}),
    voucher_service.CODE_CONFLICT: (
        409,
        {"code": "VOUCHER_CODE_CONFLICT", "message": "Voucher code already exists.", "field": "code"},
    ),
    voucher_service.INVALID_DISCOUNT: (
        400,
        {"code": "INVALID_DISCOUNT", "message": "Percentage discount cannot be more than 100%."},
    ),
}


def _raise_voucher_error(exc: voucher_service.VoucherError) -> NoReturn:
    status_code, error = _ERRORS.get(
        str(exc),
        (400, {"code": "VOUCHER_ERROR", "message": str(exc)}),
    )
    raise HTTPException(status_code=status_code, detail={"ok": False, "error": error}) from exc


@router.get("")
def list_vouchers(
    q: str | None = None,
    status: str = Query(default=ALL, pattern="^(all|active|inactive|expired)$"),
    discount_type: str = Query(default=ALL, alias="type", pattern="^(all|percentage|fixed)$"),
    sort: SortKey | None = None,
    order: SortDirection = SortDirection.ASC,
    db: Session = Depends(get_db),
) -> dict:
    view = VoucherListView(
        search_term=q or "",
        status_filter=status,
        type_filter=discount_type,
        sort=SortState(key=sort, direction=order) if sort else None,
    )
    today = today_utc()
    vouchers = view.apply(voucher_service.list_vouchers(db), today)
    return {"ok": True, "data": {"vouchers": [_voucher_response(voucher, today) for voucher in vouchers]}}


@router.post("", status_code=201)
def create_voucher(payload: VoucherCreateRequest, db: Session = Depends(get_db)) -> dict:
    try:
        voucher = voucher_service.create_voucher(db, payload)
    except voucher_service.VoucherError as exc:
        _raise_voucher_error(exc)
    return {"ok": True, "data": {"voucher": _voucher_response(voucher)}}


@router.post("/bulk-delete")
def bulk_delete_vouchers(payload: BulkDeleteRequest, db: Session = Depends(get_db)) -> dict:
    succeeded, failed = voucher_service.delete_vouchers(db, payload.ids)
    result = BulkDeleteResponse(
        succeeded=succeeded,
        failed=[BulkDeleteFailure(id=voucher_id, reason=reason) for voucher_id, reason in failed],
    )
    return {"ok": True, "data": result.model_dump(mode="json", by_alias=True)}


@router.get("/{voucher_id}")
def get_voucher(voucher_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    try:
        voucher = voucher_service.get_voucher(db, voucher_id)
    except voucher_service.VoucherError as exc:
        _raise_voucher_error(exc)
    return {"ok": True, "data": {"voucher": _voucher_response(voucher)}}


@router.patch("/{voucher_id}")
def update_voucher(
    voucher_id: uuid.UUID,
    payload: VoucherUpdateRequest,
    db: Session = Depends(get_db),
) -> dict:
    try:
        voucher = voucher_service.update_voucher(db, voucher_id, payload)
    except voucher_service.VoucherError as exc:
        _raise_voucher_error(exc)
    return {"ok": True, "data": {"voucher": _voucher_response(voucher)}}


@router.delete("/{voucher_id}")
def delete_voucher(voucher_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    try:
        voucher_service.delete_voucher(db, voucher_id)
    except voucher_service.VoucherError as exc:
        _raise_voucher_error(exc)
    return {"ok": True, "data": {"deleted": True}}


def _voucher_response(voucher: Voucher, today: date | None = None) -> dict:
    return VoucherResponse(
        id=voucher.id,
        code=voucher.code,
        discount_amount=voucher.discount_amount,
        discount_type=voucher.discount_type,
        expiry_date=voucher.expiry_date,
        is_active=voucher.is_active,
        status=resolve_voucher_status(voucher, today or today_utc()),
        created_at=voucher.created_at,
        updated_at=voucher.updated_at,
    ).model_dump(mode="json", by_alias=True)
