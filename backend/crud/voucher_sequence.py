from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.audit_mixin import now_ist
from models.voucher import VoucherType
from models.voucher_sequence import VoucherSequence


def _increment(db: Session, tenant_id: str, voucher_type: VoucherType) -> int:
    result = db.execute(
        update(VoucherSequence)
        .where(VoucherSequence.tenant_id == tenant_id, VoucherSequence.voucher_type == voucher_type)
        .values(last_value=VoucherSequence.last_value + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def next_sequence_value(db: Session, tenant_id: str, voucher_type: VoucherType) -> int:
    """Reserve the next number for (tenant, type) inside the caller's transaction.

    The increment happens in the UPDATE statement itself, which row-locks the
    counter until the caller commits or rolls back, so two concurrent postings
    can never be handed the same value.
    """
    if not _increment(db, tenant_id, voucher_type):
        try:
            with db.begin_nested():
                db.add(VoucherSequence(tenant_id=tenant_id, voucher_type=voucher_type, last_value=1))
            return 1
        except IntegrityError:
            # Someone else created the counter first
            _increment(db, tenant_id, voucher_type)

    return db.query(VoucherSequence.last_value).filter(
        VoucherSequence.tenant_id == tenant_id,
        VoucherSequence.voucher_type == voucher_type
    ).scalar()


def format_voucher_number(voucher_type: VoucherType, sequence_no: int, posted_at: Optional[datetime] = None) -> str:
    """e.g. RV24040001: type prefix, posting year and month, then the running sequence."""
    posted_at = posted_at or now_ist()
    return f"{voucher_type.prefix}{posted_at.strftime('%y%m')}{sequence_no:04d}"


def allocate_voucher_number(db: Session, tenant_id: str, voucher_type: VoucherType) -> Tuple[int, str]:
    sequence_no = next_sequence_value(db, tenant_id, voucher_type)
    return sequence_no, format_voucher_number(voucher_type, sequence_no)
