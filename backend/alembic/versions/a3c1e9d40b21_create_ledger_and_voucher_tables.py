"""create ledger and voucher tables

Revision ID: a3c1e9d40b21
Revises:
Create Date: 2026-10-19 10:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a3c1e9d40b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ACCOUNT_TYPES = (
    'CASH', 'BANK', 'SUNDRY_DEBTORS', 'SUNDRY_CREDITORS', 'SALES', 'PURCHASES',
    'INCOME', 'EXPENSE', 'ASSET', 'FIXED_ASSETS', 'INVESTMENT', 'LIABILITY',
    'DEPOSIT', 'CAPITAL', 'SHARE_CAPITAL', 'PROFIT_AND_LOSS',
)
VOUCHER_TYPES = ('JOURNAL', 'PAYMENT', 'RECEIPT')
REFERENCE_TYPES = ('MANUAL', 'SALE', 'PURCHASE', 'PAYMENT', 'OPENING', 'LOAN')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Create the chart of accounts, vouchers, numbering counters, config and audit tables."""
    balance_side = sa.Enum('DR', 'CR', name='balanceside')

    op.create_table(
        'app_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('name', 'tenant_id', name='_app_config_name_tenant_uc'),
    )
    op.create_index('ix_app_config_id', 'app_config', ['id'])
    op.create_index('ix_app_config_name', 'app_config', ['name'])
    op.create_index('ix_app_config_tenant_id', 'app_config', ['tenant_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.String(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
    )
    op.create_index('ix_audit_log_id', 'audit_log', ['id'])
    op.create_index('ix_audit_log_record_id', 'audit_log', ['record_id'])
    op.create_index('ix_audit_log_tenant_id', 'audit_log', ['tenant_id'])

    op.create_table(
        'ledger_accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('account_type', sa.Enum(*ACCOUNT_TYPES, name='accounttype'), nullable=False),
        sa.Column('parent_group', sa.String(length=150), nullable=True),
        sa.Column('opening_balance_paise', sa.BigInteger(), nullable=False),
        sa.Column('opening_balance_side', balance_side, nullable=False),
        sa.Column('current_balance_paise', sa.BigInteger(), nullable=False),
        sa.Column('current_balance_side', balance_side, nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'INACTIVE', name='ledgerstatus'), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_ledger_accounts_id', 'ledger_accounts', ['id'])
    op.create_index('ix_ledger_accounts_tenant_id', 'ledger_accounts', ['tenant_id'])
    op.create_index('ix_ledger_accounts_tenant_status', 'ledger_accounts', ['tenant_id', 'status'])
    op.create_index(
        'uq_ledger_accounts_active_name', 'ledger_accounts', ['tenant_id', 'name'],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
        sqlite_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        'vouchers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('voucher_type', sa.Enum(*VOUCHER_TYPES, name='vouchertype'), nullable=False),
        sa.Column('sequence_no', sa.Integer(), nullable=False),
        sa.Column('voucher_number', sa.String(length=30), nullable=False),
        sa.Column('voucher_date', sa.Date(), nullable=False),
        sa.Column('reference_type', sa.Enum(*REFERENCE_TYPES, name='referencetype'), nullable=False),
        sa.Column('reference_id', sa.String(), nullable=True),
        sa.Column('narration', sa.Text(), nullable=True),
        sa.Column('total_debit_paise', sa.BigInteger(), nullable=False),
        sa.Column('total_credit_paise', sa.BigInteger(), nullable=False),
        sa.Column('status', sa.Enum('POSTED', 'VOID', name='voucherstatus'), nullable=False),
        *_timestamps(),
        sa.Column('voided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('voided_by', sa.String(), nullable=True),
        sa.Column('void_reason', sa.Text(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'voucher_type', 'sequence_no', name='_tenant_voucher_type_seq_uc'),
        sa.UniqueConstraint('tenant_id', 'voucher_number', name='_tenant_voucher_number_uc'),
    )
    op.create_index('ix_vouchers_id', 'vouchers', ['id'])
    op.create_index('ix_vouchers_tenant_id', 'vouchers', ['tenant_id'])
    op.create_index('ix_vouchers_tenant_date', 'vouchers', ['tenant_id', 'voucher_date'])

    op.create_table(
        'voucher_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('voucher_id', sa.Integer(), sa.ForeignKey('vouchers.id'), nullable=False),
        sa.Column('ledger_id', sa.Integer(), sa.ForeignKey('ledger_accounts.id'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('ledger_name_snapshot', sa.String(length=150), nullable=False),
        sa.Column('debit_paise', sa.BigInteger(), nullable=False),
        sa.Column('credit_paise', sa.BigInteger(), nullable=False),
        sa.Column('narration', sa.Text(), nullable=True),
        sa.CheckConstraint('debit_paise >= 0'),
        sa.CheckConstraint('credit_paise >= 0'),
        sa.CheckConstraint(
            '(debit_paise > 0 AND credit_paise = 0) OR (debit_paise = 0 AND credit_paise > 0)',
            name='check_debit_or_credit_exclusive'
        ),
    )
    op.create_index('ix_voucher_entries_id', 'voucher_entries', ['id'])
    op.create_index('ix_voucher_entries_tenant_id', 'voucher_entries', ['tenant_id'])
    op.create_index('ix_voucher_entries_voucher_id', 'voucher_entries', ['voucher_id'])
    op.create_index('ix_voucher_entries_ledger_id', 'voucher_entries', ['ledger_id'])

    op.create_table(
        'voucher_sequences',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('voucher_type', postgresql.ENUM(*VOUCHER_TYPES, name='vouchertype', create_type=False), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
        sa.UniqueConstraint('tenant_id', 'voucher_type', name='_tenant_voucher_sequence_uc'),
    )
    op.create_index('ix_voucher_sequences_id', 'voucher_sequences', ['id'])
    op.create_index('ix_voucher_sequences_tenant_id', 'voucher_sequences', ['tenant_id'])


def downgrade() -> None:
    """Drop every table created above, children first."""
    op.drop_table('voucher_sequences')
    op.drop_table('voucher_entries')
    op.drop_table('vouchers')
    op.drop_table('ledger_accounts')
    op.drop_table('audit_log')
    op.drop_table('app_config')

    bind = op.get_bind()
    for enum_name in ('accounttype', 'balanceside', 'ledgerstatus', 'vouchertype', 'referencetype', 'voucherstatus'):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
