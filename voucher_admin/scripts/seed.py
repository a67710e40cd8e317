from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from voucher_admin.db import SessionLocal
from voucher_admin.logging import configure_logging
from voucher_admin.models import DiscountType, Voucher
from voucher_admin.services.vouchers import normalize_code

logger = structlog.get_logger(__name__)


def _split_env(name: str) -> list[str]:
    raw = os.environ.get(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def seed_vouchers(
    session: Session,
    codes: list[str],
    *,
    discount_amount: float = 10,
    discount_type: DiscountType = DiscountType.PERCENTAGE,
    valid_days: int | None = None,
) -> list[Voucher]:
    expiry_date = None
    if valid_days is not None:
        expiry_date = datetime.now(timezone.utc) + timedelta(days=valid_days)

    created: list[Voucher] = []
    for raw_code in codes:
        code = normalize_code(raw_code)
        existing = session.execute(select(Voucher).where(Voucher.code == code)).scalar_one_or_none()
        if existing:
            continue
        voucher = Voucher(
            code=code,
            discount_amount=discount_amount,
            discount_type=discount_type,
            expiry_date=expiry_date,
            is_active=True,
        )
        session.add(voucher)
        created.append(voucher)

    session.commit()
    logger.info("vouchers_seeded", created=len(created), skipped=len(codes) - len(created))
    return created


def main() -> None:
    configure_logging()
    codes = _split_env("SEED_VOUCHER_CODES")
    if not codes:
        raise SystemExit("SEED_VOUCHER_CODES is required (comma-separated).")

    discount_type = DiscountType(os.environ.get("SEED_DISCOUNT_TYPE", DiscountType.PERCENTAGE.value))
    discount_amount = float(os.environ.get("SEED_DISCOUNT_AMOUNT", "10"))
    valid_days = os.environ.get("SEED_VALID_DAYS")

    with SessionLocal() as session:
        seed_vouchers(
            session,
            codes,
            discount_amount=discount_amount,
            discount_type=discount_type,
            valid_days=int(valid_days) if valid_days else None,
        )


if __name__ == "__main__":
    main()
