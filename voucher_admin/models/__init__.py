# Import models here for Alembic autogenerate convenience
from .base import Base  # noqa: F401
from .enums import DiscountType, VoucherStatus  # noqa: F401
from .voucher import Voucher  # noqa: F401
