from sqlalchemy import Column, Integer, String, BigInteger, Enum, Index, text
from database import Base
from models.audit_mixin import TimestampMixin
from utils.money import DR, CR, from_paise
import enum


class BalanceSide(enum.Enum):
    DR = DR
    CR = CR


class LedgerStatus(enum.Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ReportCategory(enum.Enum):
    ASSETS = "ASSETS"
    LIABILITIES = "LIABILITIES"
    CAPITAL = "CAPITAL"
    INCOME = "INCOME"
    EXPENSES = "EXPENSES"
    PROFIT_LOSS = "PROFIT_LOSS"


class AccountType(enum.Enum):
    CASH = "Cash"
    BANK = "Bank"
    SUNDRY_DEBTORS = "Sundry Debtors"
    SUNDRY_CREDITORS = "Sundry Creditors"
    SALES = "Sales A/c"
    PURCHASES = "Purchases A/c"
    INCOME = "Income"
    EXPENSE = "Expense"
    ASSET = "Asset"
    FIXED_ASSETS = "Fixed Assets"
    INVESTMENT = "Investment A/c"
    LIABILITY = "Liability"
    DEPOSIT = "Deposit A/c"
    CAPITAL = "Capital"
    SHARE_CAPITAL = "Share Capital"
    PROFIT_AND_LOSS = "Profit & Loss A/c"

    @property
    def category(self) -> ReportCategory:
        return _CATEGORY[self]

    @property
    def natural_side(self) -> BalanceSide:
        # Asset and expense accounts grow on the debit side
        if self.category in (ReportCategory.ASSETS, ReportCategory.EXPENSES):
            return BalanceSide.DR
        return BalanceSide.CR

    @property
    def is_cash_or_bank(self) -> bool:
        return self in (AccountType.CASH, AccountType.BANK)

    @property
    def is_party(self) -> bool:
        return self in (AccountType.SUNDRY_DEBTORS, AccountType.SUNDRY_CREDITORS)


_CATEGORY = {
    AccountType.CASH: ReportCategory.ASSETS,
    AccountType.BANK: ReportCategory.ASSETS,
    AccountType.SUNDRY_DEBTORS: ReportCategory.ASSETS,
    AccountType.ASSET: ReportCategory.ASSETS,
    AccountType.FIXED_ASSETS: ReportCategory.ASSETS,
    AccountType.INVESTMENT: ReportCategory.ASSETS,
    AccountType.SUNDRY_CREDITORS: ReportCategory.LIABILITIES,
    AccountType.LIABILITY: ReportCategory.LIABILITIES,
    AccountType.DEPOSIT: ReportCategory.LIABILITIES,
    AccountType.CAPITAL: ReportCategory.CAPITAL,
    AccountType.SHARE_CAPITAL: ReportCategory.CAPITAL,
    AccountType.SALES: ReportCategory.INCOME,
    AccountType.INCOME: ReportCategory.INCOME,
    AccountType.PURCHASES: ReportCategory.EXPENSES,
    AccountType.EXPENSE: ReportCategory.EXPENSES,
    AccountType.PROFIT_AND_LOSS: ReportCategory.PROFIT_LOSS,
}


class LedgerAccount(Base, TimestampMixin):
    __tablename__ = "ledger_accounts"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    name = Column(String(150), nullable=False)
    account_type = Column(Enum(AccountType), nullable=False)
    parent_group = Column(String(150), nullable=True)
    # Amounts are integer paise; magnitudes are never negative, the side carries the sign
    opening_balance_paise = Column(BigInteger, nullable=False, default=0)
    opening_balance_side = Column(Enum(BalanceSide), nullable=False)
    current_balance_paise = Column(BigInteger, nullable=False, default=0)
    current_balance_side = Column(Enum(BalanceSide), nullable=False)
    status = Column(Enum(LedgerStatus), nullable=False, default=LedgerStatus.ACTIVE)
    version = Column(Integer, nullable=False)

    __table_args__ = (
        Index('ix_ledger_accounts_tenant_status', 'tenant_id', 'status'),
        # Names are unique among active ledgers only; retired names may be reused
        Index(
            'uq_ledger_accounts_active_name', 'tenant_id', 'name',
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )
    # Every UPDATE checks and bumps `version`, so two postings racing on the
    # same ledger cannot both commit a blind overwrite.
    __mapper_args__ = {"version_id_col": version}

    @property
    def opening_balance(self):
        return from_paise(self.opening_balance_paise)

    @property
    def current_balance(self):
        return from_paise(self.current_balance_paise)

    @property
    def is_active(self) -> bool:
        return self.status == LedgerStatus.ACTIVE
