from models.app_config import AppConfig
from models.audit_log import AuditLog
from models.ledger_account import LedgerAccount
from models.voucher import Voucher
from models.voucher_entry import VoucherEntry
from models.voucher_sequence import VoucherSequence
