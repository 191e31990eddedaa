"""
Voucher posting.

A voucher is validated, numbered, applied to its ledgers and stored in one
transaction. Either every ledger moves and the voucher exists, or nothing
changed. Posted vouchers are never edited; voiding posts the mirror of every
entry against the ledgers and keeps the original rows.
"""
import logging
from collections import namedtuple
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from crud import ledger_account as ledger_crud
from crud.audit_log import create_audit_log
from crud.voucher_sequence import allocate_voucher_number
from models.audit_mixin import now_ist
from models.voucher import ReferenceType, Voucher, VoucherStatus, VoucherType
from models.voucher_entry import VoucherEntry
from schemas.audit_log import AuditLogCreate
from schemas.voucher import VoucherBatchResult, VoucherBatchRowResult, VoucherCreate
from utils import sqlalchemy_to_dict
from utils.exceptions import (
    AccountingError,
    ConflictError,
    InactiveLedgerError,
    MissingCashLedgerError,
    NotFoundError,
    SameLedgerError,
    UnbalancedVoucherError,
    ValidationError,
)
from utils.money import from_paise, to_paise
from utils.tenancy import SYSTEM_USER

logger = logging.getLogger("vouchers")

PostingLine = namedtuple("PostingLine", ["ledger_id", "debit_paise", "credit_paise", "narration"])


def _field(entry: Any, name: str, default=None):
    if isinstance(entry, dict):
        return entry.get(name, default)
    return getattr(entry, name, default)


def _parse_enum(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(
            f"Unknown {field} '{value}'",
            details={"field": field, "allowed": [member.value for member in enum_cls]},
        )


def _normalize_entries(entries: Optional[Iterable[Any]], narration: Optional[str]) -> List[PostingLine]:
    lines = []
    for index, entry in enumerate(entries or []):
        ledger_id = _field(entry, "ledger_id")
        if ledger_id is None:
            raise ValidationError(f"Entry {index + 1} has no ledger", details={"entry": index})
        debit = to_paise(_field(entry, "debit_amount") or 0, field="debit_amount")
        credit = to_paise(_field(entry, "credit_amount") or 0, field="credit_amount")
        if debit < 0 or credit < 0:
            raise ValidationError(f"Entry {index + 1} has a negative amount", details={"entry": index})
        if debit > 0 and credit > 0:
            raise ValidationError(
                f"Entry {index + 1} is both a debit and a credit", details={"entry": index}
            )
        if debit == 0 and credit == 0:
            raise ValidationError(
                f"Entry {index + 1} has neither a debit nor a credit amount", details={"entry": index}
            )
        lines.append(PostingLine(ledger_id, debit, credit, _field(entry, "narration") or narration))
    return lines


def _audit(db: Session, voucher: Voucher, action: str, user_id: str, old_values: Optional[dict] = None):
    new_values = sqlalchemy_to_dict(voucher)
    new_values["entries"] = [sqlalchemy_to_dict(entry) for entry in voucher.entries]
    create_audit_log(db, AuditLogCreate(
        table_name='vouchers',
        record_id=str(voucher.id),
        changed_by=user_id,
        action=action,
        tenant_id=voucher.tenant_id,
        old_values=old_values or {},
        new_values=new_values,
    ))


def _lock_active_ledgers(db: Session, tenant_id: str, ledger_ids: Iterable[int], resolution: Optional[str] = None):
    ledgers = ledger_crud.lock_ledgers(db, tenant_id, ledger_ids)
    for ledger_id in ledger_ids:
        ledger = ledgers.get(ledger_id)
        if ledger is None:
            raise NotFoundError("Ledger", ledger_id)
        if not ledger.is_active:
            raise InactiveLedgerError(ledger.id, ledger.name, resolution)
    return ledgers


def _post(
    db: Session,
    tenant_id: str,
    voucher_type: VoucherType,
    voucher_date: date,
    lines: List[PostingLine],
    reference_type: ReferenceType,
    reference_id: Optional[str],
    narration: Optional[str],
    user_id: str,
) -> Voucher:
    ledgers = _lock_active_ledgers(db, tenant_id, [line.ledger_id for line in lines])

    total_debit = sum(line.debit_paise for line in lines)
    total_credit = sum(line.credit_paise for line in lines)
    if total_debit != total_credit:
        raise UnbalancedVoucherError(from_paise(total_debit), from_paise(total_credit))

    sequence_no, voucher_number = allocate_voucher_number(db, tenant_id, voucher_type)

    db_voucher = Voucher(
        tenant_id=tenant_id,
        voucher_type=voucher_type,
        sequence_no=sequence_no,
        voucher_number=voucher_number,
        voucher_date=voucher_date,
        reference_type=reference_type,
        reference_id=reference_id,
        narration=narration,
        total_debit_paise=total_debit,
        total_credit_paise=total_credit,
        status=VoucherStatus.POSTED,
        created_by=user_id,
    )
    for position, line in enumerate(lines):
        ledger = ledgers[line.ledger_id]
        ledger_crud.apply_entry(ledger, line.debit_paise, line.credit_paise)
        ledger.updated_by = user_id
        db_voucher.entries.append(VoucherEntry(
            tenant_id=tenant_id,
            ledger_id=ledger.id,
            position=position,
            ledger_name_snapshot=ledger.name,
            debit_paise=line.debit_paise,
            credit_paise=line.credit_paise,
            narration=line.narration,
        ))

    db.add(db_voucher)
    db.flush()
    _audit(db, db_voucher, 'CREATE', user_id)
    return db_voucher


def create_voucher(
    db: Session,
    tenant_id: str,
    voucher_type: Union[VoucherType, str],
    voucher_date: date,
    entries: Iterable[Any],
    reference_type: Union[ReferenceType, str] = ReferenceType.MANUAL,
    narration: Optional[str] = None,
    reference_id: Optional[str] = None,
    user_id: str = SYSTEM_USER,
) -> Voucher:
    """Validate and post a double-entry voucher.

    `entries` holds two or more items with `ledger_id`, `debit_amount`,
    `credit_amount` and optional `narration` (schema objects or dicts).
    Raises ValidationError, NotFoundError, InactiveLedgerError,
    SameLedgerError, UnbalancedVoucherError or ConcurrentUpdateError; on any
    failure no ledger balance has moved.
    """
    voucher_type = _parse_enum(VoucherType, voucher_type, "voucher_type")
    reference_type = _parse_enum(ReferenceType, reference_type or ReferenceType.MANUAL, "reference_type")
    if isinstance(voucher_date, datetime):
        voucher_date = voucher_date.date()
    if not isinstance(voucher_date, date):
        raise ValidationError("voucher_date is required", details={"field": "voucher_date"})

    lines = _normalize_entries(entries, narration)
    if len(lines) < 2:
        raise ValidationError("A voucher needs at least two entries", details={"entries": len(lines)})
    if len(lines) == 2 and lines[0].ledger_id == lines[1].ledger_id:
        raise SameLedgerError(lines[0].ledger_id)

    try:
        db_voucher = _post(
            db, tenant_id, voucher_type, voucher_date, lines,
            reference_type, reference_id, narration, user_id,
        )
        db.commit()
    except StaleDataError:
        raise ledger_crud.concurrent_update_error(db, f"posting {voucher_type.value} voucher")
    except Exception:
        db.rollback()
        raise
    db.refresh(db_voucher)

    logger.info(
        f"{voucher_type.value} voucher {db_voucher.voucher_number} posted for "
        f"{db_voucher.total_debit} by {user_id} for tenant {tenant_id}"
    )
    return db_voucher


def _resolve_cash_ledger(db: Session, tenant_id: str, cash_ledger_id: Optional[int]):
    if cash_ledger_id is None:
        cash_ledger = ledger_crud.find_default_cash_ledger(db, tenant_id)
        if cash_ledger is None:
            raise MissingCashLedgerError()
        return cash_ledger
    cash_ledger = ledger_crud.require_ledger(db, cash_ledger_id, tenant_id)
    if not cash_ledger.account_type.is_cash_or_bank:
        raise ValidationError(
            f"Ledger '{cash_ledger.name}' is not a Cash or Bank ledger",
            details={"ledger_id": cash_ledger.id, "account_type": cash_ledger.account_type.value},
        )
    return cash_ledger


def _two_legs(debit_ledger_id: int, credit_ledger_id: int, amount, narration: Optional[str]) -> List[dict]:
    if debit_ledger_id == credit_ledger_id:
        raise SameLedgerError(debit_ledger_id)
    return [
        {"ledger_id": debit_ledger_id, "debit_amount": amount, "credit_amount": Decimal("0"), "narration": narration},
        {"ledger_id": credit_ledger_id, "debit_amount": Decimal("0"), "credit_amount": amount, "narration": narration},
    ]


def build_receipt_entries(
    db: Session, tenant_id: str, payer_ledger_id: int, amount,
    cash_ledger_id: Optional[int] = None, narration: Optional[str] = None,
) -> List[dict]:
    """Money in: debit the Cash/Bank ledger, credit the payer's ledger."""
    cash_ledger = _resolve_cash_ledger(db, tenant_id, cash_ledger_id)
    return _two_legs(cash_ledger.id, payer_ledger_id, amount, narration)


def build_payment_entries(
    db: Session, tenant_id: str, payee_ledger_id: int, amount,
    cash_ledger_id: Optional[int] = None, narration: Optional[str] = None,
) -> List[dict]:
    """Money out: debit the payee or expense ledger, credit the Cash/Bank ledger."""
    cash_ledger = _resolve_cash_ledger(db, tenant_id, cash_ledger_id)
    return _two_legs(payee_ledger_id, cash_ledger.id, amount, narration)


def build_journal_entries(debit_ledger_id: int, credit_ledger_id: int, amount, narration: Optional[str] = None) -> List[dict]:
    return _two_legs(debit_ledger_id, credit_ledger_id, amount, narration)


def _require(value, field: str, voucher_type: VoucherType):
    if value is None:
        raise ValidationError(
            f"{field} is required for a {voucher_type.value} voucher", details={"field": field}
        )
    return value


def create_voucher_from_request(
    db: Session, tenant_id: str, request: VoucherCreate, user_id: str = SYSTEM_USER
) -> Voucher:
    """Post either the raw entries of a request or the entries built from its convenience fields."""
    voucher_type = request.voucher_type
    if request.entries is not None:
        if any(v is not None for v in (request.amount, request.debit_ledger_id, request.credit_ledger_id)):
            raise ValidationError("Send either entries or amount with ledger ids, not both")
        entries = request.entries
    else:
        amount = _require(request.amount, "amount", voucher_type)
        if voucher_type == VoucherType.RECEIPT:
            entries = build_receipt_entries(
                db, tenant_id, _require(request.credit_ledger_id, "credit_ledger_id", voucher_type),
                amount, request.cash_ledger_id, request.narration,
            )
        elif voucher_type == VoucherType.PAYMENT:
            entries = build_payment_entries(
                db, tenant_id, _require(request.debit_ledger_id, "debit_ledger_id", voucher_type),
                amount, request.cash_ledger_id, request.narration,
            )
        else:
            entries = build_journal_entries(
                _require(request.debit_ledger_id, "debit_ledger_id", voucher_type),
                _require(request.credit_ledger_id, "credit_ledger_id", voucher_type),
                amount, request.narration,
            )

    return create_voucher(
        db,
        tenant_id,
        voucher_type=voucher_type,
        voucher_date=request.voucher_date,
        entries=entries,
        reference_type=request.reference_type,
        narration=request.narration,
        reference_id=request.reference_id,
        user_id=user_id,
    )


def create_vouchers_batch(
    db: Session, tenant_id: str, requests: List[VoucherCreate], user_id: str = SYSTEM_USER
) -> VoucherBatchResult:
    """Post each row on its own. A failed row is reported and the rest carry on."""
    results = []
    for index, request in enumerate(requests):
        try:
            db_voucher = create_voucher_from_request(db, tenant_id, request, user_id=user_id)
            results.append(VoucherBatchRowResult(
                index=index, success=True,
                voucher_id=db_voucher.id, voucher_number=db_voucher.voucher_number,
            ))
        except AccountingError as e:
            results.append(VoucherBatchRowResult(
                index=index, success=False, error_code=e.error_code, message=e.message,
            ))
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Database error posting batch row {index} for tenant {tenant_id}")
            results.append(VoucherBatchRowResult(
                index=index, success=False, error_code="ERR_DATABASE", message="Database error while posting voucher",
            ))

    success_count = sum(1 for r in results if r.success)
    failure_count = len(results) - success_count
    logger.info(f"Voucher batch for tenant {tenant_id}: {success_count} posted, {failure_count} failed")
    return VoucherBatchResult(success_count=success_count, failure_count=failure_count, results=results)


def get_voucher(db: Session, voucher_id: int, tenant_id: str) -> Optional[Voucher]:
    return db.query(Voucher).options(selectinload(Voucher.entries)).filter(
        Voucher.id == voucher_id,
        Voucher.tenant_id == tenant_id
    ).first()


def require_voucher(db: Session, voucher_id: int, tenant_id: str) -> Voucher:
    db_voucher = get_voucher(db, voucher_id, tenant_id)
    if db_voucher is None:
        raise NotFoundError("Voucher", voucher_id)
    return db_voucher


def get_vouchers(
    db: Session,
    tenant_id: str,
    voucher_type: Optional[VoucherType] = None,
    status: Optional[VoucherStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100
) -> List[Voucher]:
    query = db.query(Voucher).options(selectinload(Voucher.entries)).filter(Voucher.tenant_id == tenant_id)

    if voucher_type:
        query = query.filter(Voucher.voucher_type == voucher_type)
    if status:
        query = query.filter(Voucher.status == status)
    if start_date:
        query = query.filter(Voucher.voucher_date >= start_date)
    if end_date:
        query = query.filter(Voucher.voucher_date <= end_date)

    return query.order_by(Voucher.voucher_date.desc(), Voucher.id.desc()).offset(skip).limit(limit).all()


def delete_voucher(
    db: Session, voucher_id: int, tenant_id: str, reason: Optional[str] = None, user_id: str = SYSTEM_USER
) -> Voucher:
    """Void a voucher: reverse its effect on every ledger and keep it for audit."""
    try:
        db_voucher = db.query(Voucher).filter(
            Voucher.id == voucher_id,
            Voucher.tenant_id == tenant_id
        ).with_for_update().populate_existing().first()
        if db_voucher is None:
            raise NotFoundError("Voucher", voucher_id)
        if db_voucher.status == VoucherStatus.VOID:
            raise ConflictError(
                f"Voucher {db_voucher.voucher_number} is already void",
                details={"voucher_id": db_voucher.id},
            )

        old_values = sqlalchemy_to_dict(db_voucher)
        ledgers = _lock_active_ledgers(
            db, tenant_id, [entry.ledger_id for entry in db_voucher.entries],
            resolution="Reactivate the ledger, void the voucher, then deactivate it again.",
        )
        for entry in db_voucher.entries:
            ledger = ledgers[entry.ledger_id]
            # Mirror of the original posting
            ledger_crud.apply_entry(ledger, entry.credit_paise, entry.debit_paise)
            ledger.updated_by = user_id

        db_voucher.status = VoucherStatus.VOID
        db_voucher.voided_at = now_ist()
        db_voucher.voided_by = user_id
        db_voucher.void_reason = reason
        db_voucher.updated_by = user_id
        _audit(db, db_voucher, 'VOID', user_id, old_values)
        db.commit()
    except StaleDataError:
        raise ledger_crud.concurrent_update_error(db, f"voiding voucher {voucher_id}")
    except Exception:
        db.rollback()
        raise
    db.refresh(db_voucher)

    logger.info(f"Voucher {db_voucher.voucher_number} voided by {user_id} for tenant {tenant_id}")
    return db_voucher
