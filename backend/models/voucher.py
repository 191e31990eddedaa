from sqlalchemy import Column, Integer, String, Date, Enum, Text, BigInteger, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin, VoidMixin
from utils.money import from_paise
import enum


class VoucherType(enum.Enum):
    JOURNAL = "Journal"
    PAYMENT = "Payment"
    RECEIPT = "Receipt"

    @property
    def prefix(self) -> str:
        return {"Journal": "JV", "Payment": "PV", "Receipt": "RV"}[self.value]


class VoucherStatus(enum.Enum):
    POSTED = "Posted"
    VOID = "Void"


class ReferenceType(enum.Enum):
    MANUAL = "Manual"
    SALE = "Sale"
    PURCHASE = "Purchase"
    PAYMENT = "Payment"
    OPENING = "Opening"
    LOAN = "Loan"


class Voucher(Base, TimestampMixin, VoidMixin):
    __tablename__ = "vouchers"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    voucher_type = Column(Enum(VoucherType), nullable=False)
    sequence_no = Column(Integer, nullable=False)  # Tenant + type sequence, never reset
    voucher_number = Column(String(30), nullable=False)
    voucher_date = Column(Date, nullable=False)
    reference_type = Column(Enum(ReferenceType), nullable=False, default=ReferenceType.MANUAL)
    reference_id = Column(String, nullable=True)
    narration = Column(Text, nullable=True)
    total_debit_paise = Column(BigInteger, nullable=False)
    total_credit_paise = Column(BigInteger, nullable=False)
    status = Column(Enum(VoucherStatus), nullable=False, default=VoucherStatus.POSTED)

    # Relationships
    entries = relationship(
        "VoucherEntry",
        back_populates="voucher",
        order_by="VoucherEntry.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint('tenant_id', 'voucher_type', 'sequence_no', name='_tenant_voucher_type_seq_uc'),
        UniqueConstraint('tenant_id', 'voucher_number', name='_tenant_voucher_number_uc'),
        Index('ix_vouchers_tenant_date', 'tenant_id', 'voucher_date'),
    )

    @property
    def total_debit(self):
        return from_paise(self.total_debit_paise)

    @property
    def total_credit(self):
        return from_paise(self.total_credit_paise)
