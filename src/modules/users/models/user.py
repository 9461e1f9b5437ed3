from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from database import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)

    # Bound through /users/initial-enable; invited signers inherit the
    # inviter's wallet until they enable their own.
    wallet_address = Column(String, nullable=True)
    enabled = Column(Boolean, nullable=False, default=False)
    initial_transaction_hash = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    contracts = relationship("Contract", back_populates="creator")
    signatures = relationship(
        "ContractSigner",
        back_populates="user",
        cascade="all, delete-orphan"
    )
