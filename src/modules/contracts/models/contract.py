from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, LargeBinary
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from database import Base


class ContractStatus(PyEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"


class Contract(Base):
    __tablename__ = 'contracts'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False)
    document = Column(LargeBinary, nullable=False)
    # Creation anchor supplied by the client; stored as-is.
    transaction_hash = Column(String, unique=True, nullable=False, index=True)
    status = Column(
        Enum(ContractStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ContractStatus.DRAFT
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    created_by = Column(Integer, ForeignKey('users.id'), nullable=False)
    creator = relationship("User", back_populates="contracts")

    signers = relationship(
        "ContractSigner",
        back_populates="contract",
        order_by="[ContractSigner.created_at, ContractSigner.user_id]",
        cascade="all, delete-orphan"
    )
