from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from decimal import Decimal
from models.ledger_account import AccountType, BalanceSide
from models.voucher import VoucherType

class LedgerStatementEntry(BaseModel):
    date: date
    voucher_id: int
    voucher_number: str
    voucher_type: VoucherType
    particulars: str
    narration: Optional[str] = None
    debit: Decimal
    credit: Decimal
    running_balance: Decimal
    running_balance_side: BalanceSide

class LedgerStatement(BaseModel):
    ledger_id: int
    ledger_name: str
    account_type: AccountType
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    # Balance carried into the window, from the ledger's opening balance plus all prior rows
    opening_balance: Decimal
    opening_balance_side: BalanceSide
    entries: List[LedgerStatementEntry]
    sum_debit: Decimal
    sum_credit: Decimal
    closing_balance: Decimal
    closing_balance_side: BalanceSide
