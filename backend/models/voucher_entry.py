from sqlalchemy import Column, Integer, String, Text, BigInteger, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base
from utils.money import from_paise

class VoucherEntry(Base):
    __tablename__ = "voucher_entries"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    voucher_id = Column(Integer, ForeignKey("vouchers.id"), nullable=False, index=True)
    ledger_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    ledger_name_snapshot = Column(String(150), nullable=False)
    debit_paise = Column(BigInteger, CheckConstraint('debit_paise >= 0'), nullable=False, default=0)
    credit_paise = Column(BigInteger, CheckConstraint('credit_paise >= 0'), nullable=False, default=0)
    narration = Column(Text, nullable=True)

    # Relationships
    voucher = relationship("Voucher", back_populates="entries")
    ledger = relationship("LedgerAccount")

    __table_args__ = (
        CheckConstraint(
            '(debit_paise > 0 AND credit_paise = 0) OR (debit_paise = 0 AND credit_paise > 0)',
            name='check_debit_or_credit_exclusive'
        ),
    )

    @property
    def debit_amount(self):
        return from_paise(self.debit_paise)

    @property
    def credit_amount(self):
        return from_paise(self.credit_paise)
