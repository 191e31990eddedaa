from pydantic import BaseModel, Field, computed_field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from models.voucher import VoucherType, VoucherStatus, ReferenceType
from schemas.voucher_entry import VoucherEntryCreate, VoucherEntry
from utils.formatting import amount_to_words

class VoucherBase(BaseModel):
    voucher_type: VoucherType
    voucher_date: date
    reference_type: ReferenceType = ReferenceType.MANUAL
    reference_id: Optional[str] = None
    narration: Optional[str] = None

class VoucherCreate(VoucherBase):
    """Either raw `entries`, or the two-leg convenience fields.

    Receipt: `credit_ledger_id` is the payer; `cash_ledger_id` (optional) is the
    Cash/Bank ledger debited. Payment: `debit_ledger_id` is the payee;
    `cash_ledger_id` is credited. Journal: `debit_ledger_id` and
    `credit_ledger_id`.
    """
    entries: Optional[List[VoucherEntryCreate]] = None
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    debit_ledger_id: Optional[int] = None
    credit_ledger_id: Optional[int] = None
    cash_ledger_id: Optional[int] = None

class VoucherVoid(BaseModel):
    reason: Optional[str] = None

class Voucher(VoucherBase):
    id: int
    tenant_id: str
    voucher_number: str
    sequence_no: int
    status: VoucherStatus
    total_debit: Decimal
    total_credit: Decimal
    entries: List[VoucherEntry] = []
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    voided_at: Optional[datetime] = None
    voided_by: Optional[str] = None
    void_reason: Optional[str] = None

    @computed_field
    @property
    def amount_in_words(self) -> str:
        return amount_to_words(self.total_debit)

    class Config:
        from_attributes = True

class VoucherBatchCreate(BaseModel):
    vouchers: List[VoucherCreate] = Field(..., min_length=1)

class VoucherBatchRowResult(BaseModel):
    index: int
    success: bool
    voucher_id: Optional[int] = None
    voucher_number: Optional[str] = None
    error_code: Optional[str] = None
    message: Optional[str] = None

class VoucherBatchResult(BaseModel):
    success_count: int
    failure_count: int
    results: List[VoucherBatchRowResult]
