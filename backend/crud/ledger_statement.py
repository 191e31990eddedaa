from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, contains_eager

from crud.ledger_account import require_ledger
from models.voucher import Voucher, VoucherStatus
from models.voucher_entry import VoucherEntry
from schemas.ledger_statement import LedgerStatement, LedgerStatementEntry
from utils.exceptions import ValidationError
from utils.money import from_paise, from_signed, to_signed


def _particulars(entry: VoucherEntry) -> str:
    """Names of the ledgers on the other side of the voucher, as they were when it was posted."""
    entry_is_debit = entry.debit_paise > 0
    names = []
    for other in entry.voucher.entries:
        if other.id == entry.id:
            continue
        if (other.debit_paise > 0) != entry_is_debit and other.ledger_name_snapshot not in names:
            names.append(other.ledger_name_snapshot)
    return ", ".join(names) if names else entry.ledger_name_snapshot


def get_ledger_entries(db: Session, ledger_id: int, tenant_id: str, to_date: Optional[date] = None) -> List[VoucherEntry]:
    """Posted entries for one ledger in posting order. Void vouchers never appear."""
    query = (
        db.query(VoucherEntry)
        .join(VoucherEntry.voucher)
        .options(contains_eager(VoucherEntry.voucher).selectinload(Voucher.entries))
        .filter(
            VoucherEntry.ledger_id == ledger_id,
            VoucherEntry.tenant_id == tenant_id,
            Voucher.status == VoucherStatus.POSTED,
        )
    )
    if to_date:
        query = query.filter(Voucher.voucher_date <= to_date)
    return query.order_by(Voucher.voucher_date.asc(), Voucher.id.asc(), VoucherEntry.position.asc()).all()


def get_statement(
    db: Session,
    ledger_id: int,
    tenant_id: str,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> LedgerStatement:
    """Replay a ledger from its opening balance.

    Running balances always count from the ledger's opening balance; a date
    window only hides rows, it never restarts the count. Entries before
    `from_date` fold into the window's opening balance.
    """
    if from_date and to_date and from_date > to_date:
        raise ValidationError("from_date must not be after to_date", details={
            "from_date": from_date.isoformat(), "to_date": to_date.isoformat()
        })

    ledger = require_ledger(db, ledger_id, tenant_id)
    natural_side = ledger.account_type.natural_side.value

    running = to_signed(ledger.opening_balance_paise, ledger.opening_balance_side.value)
    window_opening = running
    sum_debit = 0
    sum_credit = 0
    rows = []

    for entry in get_ledger_entries(db, ledger.id, tenant_id, to_date):
        running += entry.debit_paise - entry.credit_paise
        if from_date and entry.voucher.voucher_date < from_date:
            window_opening = running
            continue

        sum_debit += entry.debit_paise
        sum_credit += entry.credit_paise
        magnitude, side = from_signed(running, natural_side)
        rows.append(LedgerStatementEntry(
            date=entry.voucher.voucher_date,
            voucher_id=entry.voucher.id,
            voucher_number=entry.voucher.voucher_number,
            voucher_type=entry.voucher.voucher_type,
            particulars=_particulars(entry),
            narration=entry.narration or entry.voucher.narration,
            debit=from_paise(entry.debit_paise),
            credit=from_paise(entry.credit_paise),
            running_balance=from_paise(magnitude),
            running_balance_side=side,
        ))

    opening_magnitude, opening_side = from_signed(window_opening, natural_side)
    closing_magnitude, closing_side = from_signed(running, natural_side)
    return LedgerStatement(
        ledger_id=ledger.id,
        ledger_name=ledger.name,
        account_type=ledger.account_type,
        from_date=from_date,
        to_date=to_date,
        opening_balance=from_paise(opening_magnitude),
        opening_balance_side=opening_side,
        entries=rows,
        sum_debit=from_paise(sum_debit),
        sum_credit=from_paise(sum_credit),
        closing_balance=from_paise(closing_magnitude),
        closing_balance_side=closing_side,
    )
