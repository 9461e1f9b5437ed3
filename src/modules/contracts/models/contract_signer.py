from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from database import Base


class SignerStatus(PyEnum):
    PENDING = "pending"
    SIGNED = "signed"


class ContractSigner(Base):
    """One signing slot per (contract, user). `signed` is terminal."""
    __tablename__ = "contract_signers"

    contract_id = Column(Integer, ForeignKey("contracts.id", ondelete="CASCADE"), primary_key=True)
    user_id     = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"),     primary_key=True)
    status      = Column(
        Enum(SignerStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SignerStatus.PENDING
    )
    signed_at               = Column(DateTime, nullable=True)
    transaction_hash        = Column(String, nullable=True)
    parent_transaction_hash = Column(String, nullable=True)
    created_at              = Column(DateTime, default=datetime.utcnow, nullable=False)

    contract = relationship("Contract", back_populates="signers")
    user     = relationship("User", back_populates="signatures")
