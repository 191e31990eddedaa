from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date
from decimal import Decimal
from models.ledger_account import AccountType, BalanceSide, ReportCategory

class ProfitAndLoss(BaseModel):
    as_on_date: Optional[date] = None
    total_income: Decimal
    total_expense: Decimal
    net_profit: Decimal

class BalanceSheetGroupConfig(BaseModel):
    group_name: str = Field(..., min_length=1)
    keywords: List[str] = []

    @field_validator('keywords')
    @classmethod
    def check_keywords(cls, keywords):
        cleaned = [k.strip() for k in keywords]
        if any(not k for k in cleaned):
            raise ValueError('keywords must not be blank')
        return cleaned

class BalanceSheetConfig(BaseModel):
    """Ordered keyword table per side. First matching group wins."""
    liability_groups: List[BalanceSheetGroupConfig]
    asset_groups: List[BalanceSheetGroupConfig]

    @field_validator('liability_groups', 'asset_groups')
    @classmethod
    def check_unique_group_names(cls, groups):
        seen = set()
        for group in groups:
            key = group.group_name.strip().lower()
            if key in seen:
                raise ValueError(f"group '{group.group_name}' is listed more than once")
            seen.add(key)
        return groups

class BalanceSheetItem(BaseModel):
    ledger_name: str
    amount: Decimal
    ledger_id: Optional[int] = None

class BalanceSheetGroup(BaseModel):
    group_name: str
    items: List[BalanceSheetItem]
    total: Decimal

class BalanceSheetSide(BaseModel):
    groups: List[BalanceSheetGroup]
    total: Decimal

class BalanceSheet(BaseModel):
    as_on_date: Optional[date] = None
    liabilities: BalanceSheetSide
    assets: BalanceSheetSide
    net_profit: Decimal
    total_liabilities_side: Decimal
    total_assets_side: Decimal
    imbalance: Decimal
    is_balanced: bool
    warning: Optional[str] = None

class BalanceSheetRequest(BaseModel):
    as_on_date: Optional[date] = None
    config: Optional[BalanceSheetConfig] = None

class TrialBalanceRecord(BaseModel):
    ledger_id: int
    ledger_name: str
    account_type: AccountType
    category: ReportCategory
    debit_balance: Decimal
    credit_balance: Decimal
    balance_side: BalanceSide

class TrialBalance(BaseModel):
    as_on_date: Optional[date] = None
    records: List[TrialBalanceRecord]
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal
