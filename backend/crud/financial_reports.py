import os
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from sqlalchemy import func
from sqlalchemy.orm import Session

from crud import app_config as crud_app_config
from models.ledger_account import BalanceSide, LedgerAccount, ReportCategory
from models.voucher import Voucher, VoucherStatus
from models.voucher_entry import VoucherEntry
from schemas.financial_reports import (
    BalanceSheet,
    BalanceSheetConfig,
    BalanceSheetItem,
    ProfitAndLoss,
    TrialBalance,
    TrialBalanceRecord,
)
from utils.balance_sheet import build_balance_sheet
from utils.money import from_paise, from_signed, to_signed

load_dotenv()

BALANCE_SHEET_TOLERANCE = Decimal(os.getenv("BALANCE_SHEET_TOLERANCE", "0.01"))

LIABILITIES_SIDE = (ReportCategory.LIABILITIES, ReportCategory.CAPITAL, ReportCategory.PROFIT_LOSS)


def get_ledger_balances(db: Session, tenant_id: str, as_on_date: Optional[date] = None) -> List[Tuple[LedgerAccount, int]]:
    """Every ledger of the tenant with its signed (Dr-positive) balance in paise.

    Without a date this is the stored running balance. With a date the
    balance is rebuilt from the opening balance and the posted entries dated
    on or before it.
    """
    ledgers = db.query(LedgerAccount).filter(
        LedgerAccount.tenant_id == tenant_id
    ).order_by(LedgerAccount.name.asc(), LedgerAccount.id.asc()).all()

    if as_on_date is None:
        return [
            (ledger, to_signed(ledger.current_balance_paise, ledger.current_balance_side.value))
            for ledger in ledgers
        ]

    movements = dict(
        db.query(
            VoucherEntry.ledger_id,
            func.sum(VoucherEntry.debit_paise - VoucherEntry.credit_paise)
        )
        .join(Voucher, VoucherEntry.voucher_id == Voucher.id)
        .filter(
            Voucher.tenant_id == tenant_id,
            Voucher.status == VoucherStatus.POSTED,
            Voucher.voucher_date <= as_on_date,
        )
        .group_by(VoucherEntry.ledger_id)
        .all()
    )
    return [
        (ledger, to_signed(ledger.opening_balance_paise, ledger.opening_balance_side.value)
         + int(movements.get(ledger.id) or 0))
        for ledger in ledgers
    ]


def _profit_and_loss(balances, as_on_date: Optional[date]) -> ProfitAndLoss:
    income = 0
    expense = 0
    for ledger, signed in balances:
        category = ledger.account_type.category
        if category == ReportCategory.INCOME:
            income -= signed
        elif category == ReportCategory.EXPENSES:
            expense += signed
    return ProfitAndLoss(
        as_on_date=as_on_date,
        total_income=from_paise(income),
        total_expense=from_paise(expense),
        net_profit=from_paise(income - expense),
    )


def get_profit_and_loss(db: Session, tenant_id: str, as_on_date: Optional[date] = None) -> ProfitAndLoss:
    return _profit_and_loss(get_ledger_balances(db, tenant_id, as_on_date), as_on_date)


def get_trial_balance(db: Session, tenant_id: str, as_on_date: Optional[date] = None) -> TrialBalance:
    records = []
    total_debit = 0
    total_credit = 0
    for ledger, signed in get_ledger_balances(db, tenant_id, as_on_date):
        if signed == 0:
            continue
        magnitude, side = from_signed(signed, ledger.account_type.natural_side.value)
        debit = magnitude if side == BalanceSide.DR.value else 0
        credit = magnitude if side == BalanceSide.CR.value else 0
        total_debit += debit
        total_credit += credit
        records.append(TrialBalanceRecord(
            ledger_id=ledger.id,
            ledger_name=ledger.name,
            account_type=ledger.account_type,
            category=ledger.account_type.category,
            debit_balance=from_paise(debit),
            credit_balance=from_paise(credit),
            balance_side=side,
        ))

    category_order = list(ReportCategory)
    records.sort(key=lambda r: (category_order.index(r.category), r.ledger_name.lower()))
    return TrialBalance(
        as_on_date=as_on_date,
        records=records,
        total_debit=from_paise(total_debit),
        total_credit=from_paise(total_credit),
        difference=from_paise(total_debit - total_credit),
    )


def get_balance_sheet(
    db: Session,
    tenant_id: str,
    as_on_date: Optional[date] = None,
    config: Optional[BalanceSheetConfig] = None,
) -> BalanceSheet:
    """Split ledger balances by side and hand them to the grouping engine.

    Asset ledgers are reported Dr-positive, liability, capital and profit &
    loss ledgers Cr-positive. Income and expense ledgers only reach the sheet
    through net profit.
    """
    balances = get_ledger_balances(db, tenant_id, as_on_date)
    if config is None:
        config = crud_app_config.get_balance_sheet_config(db, tenant_id)

    liabilities_items = []
    assets_items = []
    for ledger, signed in balances:
        if signed == 0:
            continue
        category = ledger.account_type.category
        if category == ReportCategory.ASSETS:
            assets_items.append(BalanceSheetItem(ledger_id=ledger.id, ledger_name=ledger.name, amount=from_paise(signed)))
        elif category in LIABILITIES_SIDE:
            liabilities_items.append(BalanceSheetItem(ledger_id=ledger.id, ledger_name=ledger.name, amount=from_paise(-signed)))

    net_profit = _profit_and_loss(balances, as_on_date).net_profit
    return build_balance_sheet(
        liabilities_items,
        assets_items,
        config=config,
        net_profit=net_profit,
        tolerance=BALANCE_SHEET_TOLERANCE,
        as_on_date=as_on_date,
    )
