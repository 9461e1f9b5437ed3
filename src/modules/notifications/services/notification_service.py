# modules/notifications/services/notification_service.py
from typing import List

from core.logging import get_logger
from modules.notifications.services.email_service import (
    ContractInvitationEmail,
    EmailSender,
    EmailTemplate,
    SignatureReceiptEmail,
)

logger = get_logger(__name__)


class NotificationService:
    """
    Request-scoped email queue.

    Services queue emails while their unit of work is open and the caller
    flushes the queue once the transaction has committed. A rolled back unit
    of work calls `discard()`, so nothing is ever sent for state that was not
    persisted.
    """

    def __init__(self, sender: EmailSender):
        self.sender = sender
        self.pending: List[EmailTemplate] = []

    def queue_contract_invitation(self, email: str, contract_name: str, inviter_name: str,
                                  temporary_password: str) -> None:
        self.pending.append(
            ContractInvitationEmail(email, contract_name, inviter_name, temporary_password)
        )

    def queue_signature_receipt(self, email: str, contract_name: str, transaction_hash: str) -> None:
        self.pending.append(SignatureReceiptEmail(email, contract_name, transaction_hash))

    def discard(self) -> None:
        if self.pending:
            logger.info(f"Discarding {len(self.pending)} queued email(s)")
        self.pending.clear()

    def flush(self) -> int:
        """Sends every queued email; returns how many were delivered."""
        outgoing, self.pending = self.pending, []
        delivered = 0
        for email in outgoing:
            if self.sender.send(email):
                delivered += 1
        return delivered
