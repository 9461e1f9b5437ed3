import io
import math
import time
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional, Sequence

from PyPDF2 import PdfReader
from sqlalchemy import or_, text
from sqlalchemy.orm import Session, joinedload, selectinload

from core.config import settings
from core.exceptions import AuthorizationError, NotFoundError, TransactionTimeoutError, ValidationError
from core.logging import get_logger
from modules.contracts.models import Contract, ContractSigner, ContractStatus, SignerStatus
from modules.contracts.services.provisioning import provision_signer
from modules.notifications.services.notification_service import NotificationService
from modules.users.models.user import User

logger = get_logger(__name__)


class ContractPage(NamedTuple):
    items: List[Contract]
    total: int
    page: int
    limit: int
    pages: int


def describe_document(contents: bytes, filename: Optional[str], content_type: Optional[str]) -> dict:
    """Metadata echoed back after an upload; `pages` is only known for PDFs."""
    pages = None
    is_pdf = content_type == "application/pdf" or (filename or "").lower().endswith(".pdf")
    if is_pdf:
        try:
            pages = len(PdfReader(io.BytesIO(contents)).pages)
        except Exception:
            # PyPDF2 raises assorted errors on truncated files; pages stays unknown.
            logger.warning(f"Could not read PDF document {filename!r}", exc_info=True)
    return {
        "original_name": filename,
        "mime_type": content_type,
        "size": len(contents),
        "pages": pages,
    }


def dedupe_emails(emails: Sequence[str]) -> List[str]:
    cleaned = (email.strip() for email in emails if email and email.strip())
    return list(dict.fromkeys(cleaned))


class ContractService:
    """
    Contract lifecycle: creation with signer reconciliation, lookups and
    deletion. Signer transitions live in SignerService.
    """

    def __init__(
        self,
        session: Session,
        notifier: NotificationService,
        timeout: float = settings.CONTRACT_TX_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.notifier = notifier
        self.timeout = timeout
        self.clock = clock

    def _query(self):
        return self.session.query(Contract).options(
            joinedload(Contract.creator),
            selectinload(Contract.signers).joinedload(ContractSigner.user),
        )

    def verify_user(self, user_id: int, wallet_address: Optional[str]) -> User:
        """Checks that the wallet presented by the caller is the one on record."""
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not wallet_address or user.wallet_address != wallet_address:
            logger.warning("Wallet address does not match", extra={"user_id": user_id})
            raise AuthorizationError("Forbidden: Wallet address does not match")
        return user

    def create(
        self,
        creator_id: int,
        wallet_address: Optional[str],
        name: Optional[str],
        description: Optional[str],
        type: Optional[str],
        document: Optional[bytes],
        transaction_hash: Optional[str],
        signer_emails: Sequence[str] = (),
    ) -> Contract:
        """
        Creates a draft contract and links its signers in one transaction.

        Emails without an account get a disabled placeholder user and an
        invitation queued on the notifier. Invitations are only delivered
        when the caller flushes the notifier after this returns; on any
        failure the transaction is rolled back and the queue discarded.
        """
        required = {
            "name": name,
            "type": type,
            "document": document,
            "transactionHash": transaction_hash,
            "walletAddress": wallet_address,
        }
        missing = [field for field, value in required.items() if not value]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", details={"missing": missing})

        creator = self.verify_user(creator_id, wallet_address)
        emails = dedupe_emails(signer_emails)
        started = self.clock()

        try:
            self._bound_statement_time()
            contract = Contract(
                name=name,
                description=description,
                type=type,
                document=document,
                transaction_hash=transaction_hash,
                created_by=creator.id,
                status=ContractStatus.DRAFT,
                created_at=datetime.utcnow(),
            )
            self.session.add(contract)
            self.session.flush()
            self._check_deadline(started)

            signer_ids = self._resolve_signers(contract, creator, emails, wallet_address, started)

            for user_id in signer_ids:
                self.session.add(ContractSigner(
                    contract_id=contract.id,
                    user_id=user_id,
                    status=SignerStatus.PENDING,
                    created_at=datetime.utcnow(),
                ))
            self.session.flush()
            self._check_deadline(started)

            self.session.commit()
        except Exception:
            self.session.rollback()
            self.notifier.discard()
            raise

        contract_id = contract.id
        logger.info(
            f"Contract created with {len(signer_ids)} signer(s)",
            extra={"contract_id": contract_id, "user_id": creator_id},
        )
        return self.get_by_id(contract_id)

    def _resolve_signers(self, contract: Contract, creator: User, emails: List[str],
                         wallet_address: str, started: float) -> List[int]:
        """Existing users first, then freshly provisioned ones, each in request order."""
        if not emails:
            return []

        existing = {
            user.email: user.id
            for user in self.session.query(User).filter(User.email.in_(emails)).all()
        }
        signer_ids = [existing[email] for email in emails if email in existing]
        new_emails = [email for email in emails if email not in existing]

        if new_emails:
            logger.info(
                f"Provisioning {len(new_emails)} new signer(s)",
                extra={"contract_id": contract.id},
            )
        for email in new_emails:
            provisioned = provision_signer(self.session, email, wallet_address)
            self.notifier.queue_contract_invitation(
                email, contract.name, creator.name or "A member", provisioned.plain_password
            )
            signer_ids.append(provisioned.id)
            self._check_deadline(started)

        return signer_ids

    def _check_deadline(self, started: float) -> None:
        if self.clock() - started > self.timeout:
            raise TransactionTimeoutError(f"Contract creation exceeded its {self.timeout:g}s budget")

    def _bound_statement_time(self) -> None:
        # Keeps a single blocked statement from outliving the budget.
        bind = self.session.get_bind()
        if bind.dialect.name == "postgresql":
            self.session.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout * 1000)}"))

    def get_all(self, page: int = 1, limit: int = 10, status: Optional[str] = None,
                created_by: Optional[int] = None) -> ContractPage:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers")

        filters = []
        if status:
            try:
                filters.append(Contract.status == ContractStatus(status))
            except ValueError:
                raise ValidationError(f"Unknown contract status: {status}") from None
        if created_by is not None:
            filters.append(Contract.created_by == created_by)

        total = self.session.query(Contract).filter(*filters).count()
        items = (
            self._query()
            .filter(*filters)
            .order_by(Contract.created_at.desc(), Contract.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return ContractPage(items=items, total=total, page=page, limit=limit,
                            pages=math.ceil(total / limit))

    def get_by_id(self, contract_id: int) -> Contract:
        contract = self._query().filter(Contract.id == contract_id).first()
        if contract is None:
            raise NotFoundError("Contract not found")
        return contract

    def get_by_transaction_hash(self, transaction_hash: str) -> Contract:
        contract = self._query().filter(Contract.transaction_hash == transaction_hash).first()
        if contract is None:
            raise NotFoundError("Contract not found")
        return contract

    def get_by_user_id(self, user_id: int) -> List[Contract]:
        """Contracts the user created or is a signer of, newest first."""
        return (
            self._query()
            .filter(or_(
                Contract.created_by == user_id,
                Contract.signers.any(ContractSigner.user_id == user_id),
            ))
            .order_by(Contract.created_at.desc(), Contract.id.desc())
            .all()
        )

    def delete(self, contract_id: int) -> None:
        contract = self.session.get(Contract, contract_id)
        if contract is None:
            raise NotFoundError("Contract not found")
        self.session.delete(contract)
        self.session.commit()
        logger.info("Contract deleted", extra={"contract_id": contract_id})
