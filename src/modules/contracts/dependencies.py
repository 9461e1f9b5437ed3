from fastapi import Depends
from sqlalchemy.orm import Session

from database import get_db
from modules.contracts.services.contract_service import ContractService
from modules.contracts.services.signer_service import SignerService
from modules.notifications.dependencies import get_notification_service
from modules.notifications.services.notification_service import NotificationService


def get_contract_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> ContractService:
    return ContractService(db, notifier)


def get_signer_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> SignerService:
    return SignerService(db, notifier)
