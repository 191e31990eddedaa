from sqlalchemy import Column, Integer, String, Enum, UniqueConstraint
from database import Base
from models.voucher import VoucherType

class VoucherSequence(Base):
    """Per-tenant, per-voucher-type counter. Incremented in SQL, never read-then-written."""
    __tablename__ = "voucher_sequences"
    __table_args__ = (UniqueConstraint('tenant_id', 'voucher_type', name='_tenant_voucher_sequence_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, nullable=False, index=True)
    voucher_type = Column(Enum(VoucherType), nullable=False)
    last_value = Column(Integer, nullable=False, default=0)
