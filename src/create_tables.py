# create_tables.py
from core.logging import get_logger
from database import engine, Base
# Import every model so it registers with Base
from modules.users.models.user import User
from modules.contracts.models.contract import Contract
from modules.contracts.models.contract_signer import ContractSigner

logger = get_logger(__name__)


def create_tables():
    """Creates every table in the database"""
    logger.info(f"Tables to create: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    create_tables()
