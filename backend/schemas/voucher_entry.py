from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional

class VoucherEntryBase(BaseModel):
    ledger_id: int
    debit_amount: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    credit_amount: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    narration: Optional[str] = None

class VoucherEntryCreate(VoucherEntryBase):
    pass

class VoucherEntry(VoucherEntryBase):
    id: int
    voucher_id: int
    position: int
    ledger_name_snapshot: str

    class Config:
        from_attributes = True
