from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from core.exceptions import AlreadySignedError, ConflictError, NotFoundError, ValidationError
from core.logging import get_logger
from modules.contracts.models import Contract, ContractSigner, SignerStatus
from modules.notifications.services.notification_service import NotificationService
from modules.users.models.user import User

logger = get_logger(__name__)


class SignerService:
    """
    Signer slots of a contract.

    A slot starts `pending` and moves to `signed` exactly once. Removing a
    slot deletes it outright, whatever its state; adding the user again
    starts a fresh `pending` slot.
    """

    def __init__(self, session: Session, notifier: NotificationService):
        self.session = session
        self.notifier = notifier

    def _query(self):
        return self.session.query(ContractSigner).options(
            joinedload(ContractSigner.user),
            joinedload(ContractSigner.contract),
        )

    def get_contract_signers(self, contract_id: int) -> List[ContractSigner]:
        """Signers in invitation order."""
        if self.session.get(Contract, contract_id) is None:
            raise NotFoundError("Contract not found")
        return (
            self._query()
            .filter(ContractSigner.contract_id == contract_id)
            .order_by(ContractSigner.created_at.asc(), ContractSigner.user_id.asc())
            .all()
        )

    def get_signer(self, contract_id: int, user_id: int) -> ContractSigner:
        signer = (
            self._query()
            .filter(ContractSigner.contract_id == contract_id, ContractSigner.user_id == user_id)
            .first()
        )
        if signer is None:
            raise NotFoundError("Signer not found for this contract")
        return signer

    def add_signer(self, contract_id: int, user_id: int) -> ContractSigner:
        if self.session.get(Contract, contract_id) is None:
            raise NotFoundError("Contract not found")
        if self.session.get(User, user_id) is None:
            raise NotFoundError("User not found")
        if self.session.get(ContractSigner, (contract_id, user_id)) is not None:
            raise ConflictError("User is already a signer for this contract")

        self.session.add(ContractSigner(
            contract_id=contract_id,
            user_id=user_id,
            status=SignerStatus.PENDING,
            created_at=datetime.utcnow(),
        ))
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("User is already a signer for this contract") from exc

        logger.info("Signer added", extra={"contract_id": contract_id, "user_id": user_id})
        return self.get_signer(contract_id, user_id)

    def remove_signer(self, contract_id: int, user_id: int) -> None:
        signer = self.session.get(ContractSigner, (contract_id, user_id))
        if signer is None:
            raise NotFoundError("Contract signer not found")
        self.session.delete(signer)
        self.session.commit()
        logger.info("Signer removed", extra={"contract_id": contract_id, "user_id": user_id})

    def sign(self, contract_id: int, user_id: int, transaction_hash: str,
             parent_transaction_hash: Optional[str] = None) -> ContractSigner:
        """
        Moves a slot from `pending` to `signed`.

        The transition is a single conditional UPDATE, so of two concurrent
        calls only one can match the `pending` row; the other sees zero rows
        and gets AlreadySignedError.
        """
        if not transaction_hash:
            raise ValidationError("Missing required field: transactionHash")

        updated = (
            self.session.query(ContractSigner)
            .filter(
                ContractSigner.contract_id == contract_id,
                ContractSigner.user_id == user_id,
                ContractSigner.status == SignerStatus.PENDING,
            )
            .update(
                {
                    ContractSigner.status: SignerStatus.SIGNED,
                    ContractSigner.signed_at: datetime.utcnow(),
                    ContractSigner.transaction_hash: transaction_hash,
                    ContractSigner.parent_transaction_hash: parent_transaction_hash,
                },
                synchronize_session=False,
            )
        )
        if updated == 0:
            self.session.rollback()
            if self.session.get(ContractSigner, (contract_id, user_id)) is None:
                raise NotFoundError("Contract signer not found")
            raise AlreadySignedError()

        self.session.commit()
        logger.info(
            "Contract signed",
            extra={"contract_id": contract_id, "user_id": user_id, "transaction_hash": transaction_hash},
        )

        signer = self.get_signer(contract_id, user_id)
        self.notifier.queue_signature_receipt(signer.user.email, signer.contract.name, transaction_hash)
        return signer
