from __future__ import annotations

import uuid
from typing import Iterable

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voucher_admin.models import DiscountType, Voucher
from voucher_admin.schemas.voucher import MAX_PERCENTAGE, VoucherCreateRequest, VoucherUpdateRequest

logger = structlog.get_logger(__name__)

CODE_CONFLICT = "VOUCHER_CODE_CONFLICT"
NOT_FOUND = "VOUCHER_NOT_FOUND"
INVALID_DISCOUNT = "INVALID_DISCOUNT"


class VoucherError(ValueError):
    pass


def normalize_code(code: str) -> str:
    return code.strip().upper()


def list_vouchers(db: Session) -> list[Voucher]:
    stmt = select(Voucher).order_by(Voucher.created_at.desc(), Voucher.id)
    return list(db.execute(stmt).scalars().all())


def get_voucher(db: Session, voucher_id: uuid.UUID) -> Voucher:
    voucher = db.get(Voucher, voucher_id)
    if not voucher:
        raise VoucherError(NOT_FOUND)
    return voucher


def _code_taken(db: Session, code: str, *, exclude_id: uuid.UUID | None = None) -> bool:
    stmt = select(Voucher.id).where(Voucher.code == code)
    if exclude_id is not None:
        stmt = stmt.where(Voucher.id != exclude_id)
    return db.execute(stmt).first() is not None


def _commit(db: Session, voucher: Voucher) -> Voucher:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("voucher_code_conflict", code=voucher.code, source="constraint")
        raise VoucherError(CODE_CONFLICT) from exc
    db.refresh(voucher)
    return voucher


def create_voucher(db: Session, payload: VoucherCreateRequest) -> Voucher:
    code = normalize_code(payload.code)
    if _code_taken(db, code):
        logger.info("voucher_code_conflict", code=code)
        raise VoucherError(CODE_CONFLICT)

    voucher = Voucher(
        code=code,
        discount_amount=payload.discount_amount,
        discount_type=payload.discount_type,
        expiry_date=payload.expiry_date,
        is_active=payload.is_active,
    )
    db.add(voucher)
    voucher = _commit(db, voucher)
    logger.info("voucher_created", voucher_id=str(voucher.id), code=voucher.code)
    return voucher


def update_voucher(db: Session, voucher_id: uuid.UUID, payload: VoucherUpdateRequest) -> Voucher:
    voucher = get_voucher(db, voucher_id)
    changes = payload.changes()

    if "code" in changes:
        changes["code"] = normalize_code(changes["code"])
        if changes["code"] != voucher.code and _code_taken(db, changes["code"], exclude_id=voucher.id):
            logger.info("voucher_code_conflict", code=changes["code"], voucher_id=str(voucher.id))
            raise VoucherError(CODE_CONFLICT)

    discount_type = changes.get("discount_type", voucher.discount_type)
    discount_amount = changes.get("discount_amount", voucher.discount_amount)
    if DiscountType(discount_type) == DiscountType.PERCENTAGE and discount_amount > MAX_PERCENTAGE:
        raise VoucherError(INVALID_DISCOUNT)

    for field, value in changes.items():
        setattr(voucher, field, value)

    db.add(voucher)
    voucher = _commit(db, voucher)
    logger.info("voucher_updated", voucher_id=str(voucher.id), fields=sorted(changes))
    return voucher


def delete_voucher(db: Session, voucher_id: uuid.UUID) -> None:
    voucher = get_voucher(db, voucher_id)
    db.delete(voucher)
    db.commit()
    logger.info("voucher_deleted", voucher_id=str(voucher_id))


def delete_vouchers(db: Session, voucher_ids: Iterable[uuid.UUID]) -> tuple[list[str], list[tuple[str, str]]]:
    """Delete each id independently and report which ones landed.

    A failure on one id does not roll back the others.
    """
    succeeded: list[str] = []
    failed: list[tuple[str, str]] = []
    for voucher_id in voucher_ids:
        try:
            delete_voucher(db, voucher_id)
        except VoucherError as exc:
            failed.append((str(voucher_id), str(exc)))
            continue
        succeeded.append(str(voucher_id))
    if failed:
        logger.warning("voucher_bulk_delete_partial", succeeded=len(succeeded), failed=len(failed))
    return succeeded, failed
