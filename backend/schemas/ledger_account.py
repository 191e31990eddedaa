from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from models.ledger_account import AccountType, BalanceSide, LedgerStatus

class LedgerAccountBase(BaseModel):
    name: str = Field(..., max_length=150)
    account_type: AccountType
    parent_group: Optional[str] = Field(None, max_length=150)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()

class LedgerAccountCreate(LedgerAccountBase):
    opening_balance: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    # Defaults to the account type's natural side
    opening_balance_side: Optional[BalanceSide] = None

class LedgerAccountUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=150)
    account_type: Optional[AccountType] = None
    parent_group: Optional[str] = Field(None, max_length=150)

class LedgerDeactivate(BaseModel):
    force: bool = False
    reason: Optional[str] = None

class LedgerAccount(LedgerAccountBase):
    id: int
    tenant_id: str
    opening_balance: Decimal
    opening_balance_side: BalanceSide
    current_balance: Decimal
    current_balance_side: BalanceSide
    status: LedgerStatus
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class OutstandingLedger(BaseModel):
    ledger_id: int
    ledger_name: str
    account_type: AccountType
    balance: Decimal
    balance_side: BalanceSide
