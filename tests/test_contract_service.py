import itertools
import math

import pytest
from sqlalchemy.exc import IntegrityError

from core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    TransactionTimeoutError,
    ValidationError,
)
from modules.auth.services.auth_service import AuthService
from modules.contracts.models import Contract, ContractSigner, ContractStatus, SignerStatus
from modules.contracts.services.contract_service import ContractService, dedupe_emails, describe_document
from modules.contracts.services.provisioning import generate_temporary_password, provision_signer
from modules.notifications.services.email_service import ContractInvitationEmail
from modules.users.models.user import User

DOCUMENT = b"%PDF-1.4 contract body"


def create_contract(service, creator, transaction_hash="0xtx1", signers=(), name="Lease"):
    return service.create(
        creator_id=creator.id,
        wallet_address=creator.wallet_address,
        name=name,
        description="Twelve month lease",
        type="rental",
        document=DOCUMENT,
        transaction_hash=transaction_hash,
        signer_emails=list(signers),
    )


def test_create_links_existing_and_new_signers(session, notifier, email_sender, make_user):
    creator = make_user(email="owner@x.com", wallet_address="0xOWNER")
    existing = make_user(email="existing@x.com")
    service = ContractService(session, notifier)

    contract = create_contract(service, creator, signers=["existing@x.com", "new@x.com"])

    assert contract.status == ContractStatus.DRAFT
    assert contract.creator.id == creator.id
    assert len(contract.signers) == 2
    assert all(s.status == SignerStatus.PENDING for s in contract.signers)

    by_email = {s.user.email: s.user for s in contract.signers}
    assert by_email["existing@x.com"].id == existing.id
    new_user = by_email["new@x.com"]
    assert new_user.id != existing.id
    assert new_user.enabled is False
    assert new_user.wallet_address == "0xOWNER"
    assert new_user.name == "new@x.com"
    assert not AuthService.verify_password("test", new_user.password_hash)

    # Nothing leaves before the caller flushes the queue.
    assert email_sender.sent == []
    assert notifier.flush() == 1
    assert email_sender.recipients == ["new@x.com"]
    invitation = email_sender.sent[0]
    assert isinstance(invitation, ContractInvitationEmail)
    assert "Lease" in invitation.subject


def test_invitation_carries_a_working_temporary_password(session, notifier, email_sender, make_user):
    creator = make_user()
    service = ContractService(session, notifier)
    create_contract(service, creator, signers=["fresh@x.com"])
    notifier.flush()

    text = email_sender.sent[0].text
    password = text.split("temporary password: ")[1].split()[0]
    user = session.query(User).filter_by(email="fresh@x.com").one()
    assert AuthService.verify_password(password, user.password_hash)
    assert password not in user.password_hash


def test_existing_signers_are_listed_before_new_ones(session, notifier, make_user):
    creator = make_user()
    make_user(email="b@x.com")
    service = ContractService(session, notifier)

    contract = create_contract(service, creator, signers=["a-new@x.com", "b@x.com", "b@x.com"])

    emails = [s.user.email for s in contract.signers]
    assert sorted(emails) == ["a-new@x.com", "b@x.com"]
    assert session.query(ContractSigner).count() == 2


def test_create_without_signers(session, notifier, make_user):
    creator = make_user()
    contract = create_contract(ContractService(session, notifier), creator)
    assert contract.signers == []
    assert contract.document == DOCUMENT


def test_duplicate_transaction_hash_rolls_back_everything(session, notifier, make_user):
    creator = make_user()
    service = ContractService(session, notifier)
    create_contract(service, creator, transaction_hash="0xdup", signers=["first@x.com"])
    notifier.flush()
    users_before = session.query(User).count()

    with pytest.raises(IntegrityError):
        create_contract(service, creator, transaction_hash="0xdup", signers=["second@x.com"])

    assert session.query(Contract).count() == 1
    assert session.query(ContractSigner).count() == 1
    assert session.query(User).count() == users_before
    assert session.query(User).filter_by(email="second@x.com").first() is None
    assert notifier.pending == []


def test_wallet_mismatch_is_rejected(session, notifier, make_user):
    creator = make_user(wallet_address="0xREAL")
    service = ContractService(session, notifier)
    with pytest.raises(AuthorizationError):
        service.create(creator.id, "0xFAKE", "Lease", None, "rental", DOCUMENT, "0xtx", [])
    assert session.query(Contract).count() == 0


def test_missing_required_fields(session, notifier, make_user):
    creator = make_user()
    service = ContractService(session, notifier)
    with pytest.raises(ValidationError) as exc:
        service.create(creator.id, creator.wallet_address, "", None, "rental", None, "0xtx", [])
    assert exc.value.details == {"missing": ["name", "document"]}


def test_unknown_creator(session, notifier):
    with pytest.raises(NotFoundError):
        ContractService(session, notifier).create(99, "0x1", "Lease", None, "rental", DOCUMENT, "0xtx", [])


def test_time_budget_exceeded_rolls_back(session, notifier, make_user):
    creator = make_user()
    ticks = itertools.count()
    service = ContractService(session, notifier, timeout=0, clock=lambda: next(ticks))

    with pytest.raises(TransactionTimeoutError):
        create_contract(service, creator, signers=["late@x.com"])

    assert session.query(Contract).count() == 0
    assert session.query(ContractSigner).count() == 0
    assert session.query(User).filter_by(email="late@x.com").first() is None
    assert notifier.pending == []


def test_provisioning_the_same_email_twice_conflicts(session, make_user):
    provision_signer(session, "race@x.com", "0xW")
    with pytest.raises(ConflictError):
        provision_signer(session, "race@x.com", "0xW")
    session.rollback()


def test_temporary_passwords_are_random():
    passwords = {generate_temporary_password() for _ in range(20)}
    assert len(passwords) == 20
    assert all(len(p) == 16 and p.isalnum() for p in passwords)


def test_dedupe_emails_keeps_first_occurrence():
    assert dedupe_emails(["a@x.com", " b@x.com", "a@x.com", ""]) == ["a@x.com", "b@x.com"]


@pytest.mark.parametrize("total,limit", [(7, 3), (6, 3), (1, 10), (0, 5)])
def test_pagination_covers_every_contract_once(session, notifier, make_user, total, limit):
    creator = make_user()
    other = make_user()
    service = ContractService(session, notifier)
    expected = [create_contract(service, creator, transaction_hash=f"0xa{i}").id for i in range(total)]
    create_contract(service, other, transaction_hash="0xother")

    first = service.get_all(page=1, limit=limit, created_by=creator.id)
    assert first.total == total
    assert first.pages == math.ceil(total / limit)

    seen = []
    for page in range(1, first.pages + 1):
        seen.extend(c.id for c in service.get_all(page=page, limit=limit, created_by=creator.id).items)
    assert seen == list(reversed(expected))


def test_get_all_filters_by_status(session, notifier, make_user):
    creator = make_user()
    service = ContractService(session, notifier)
    create_contract(service, creator)
    assert service.get_all(status="draft").total == 1
    assert service.get_all(status="completed").total == 0
    with pytest.raises(ValidationError):
        service.get_all(status="archived")


def test_get_by_user_id_matches_creator_or_signer(session, notifier, make_user):
    a, b, c, d, e = (make_user(email=f"{n}@x.com") for n in "abcde")
    service = ContractService(session, notifier)
    c1 = create_contract(service, a, transaction_hash="0x1", signers=["b@x.com"])
    c2 = create_contract(service, c, transaction_hash="0x2", signers=["d@x.com"])
    c3 = create_contract(service, b, transaction_hash="0x3")

    def ids(user):
        return {contract.id for contract in service.get_by_user_id(user.id)}

    assert ids(a) == {c1.id}
    assert ids(b) == {c1.id, c3.id}
    assert ids(c) == {c2.id}
    assert ids(d) == {c2.id}
    assert ids(e) == set()


def test_lookups_and_delete(session, notifier, make_user):
    creator = make_user()
    service = ContractService(session, notifier)
    contract = create_contract(service, creator, transaction_hash="0xlookup", signers=["s@x.com"])

    assert service.get_by_transaction_hash("0xlookup").id == contract.id
    with pytest.raises(NotFoundError):
        service.get_by_transaction_hash("0xmissing")

    service.delete(contract.id)
    assert session.query(ContractSigner).count() == 0
    with pytest.raises(NotFoundError):
        service.get_by_id(contract.id)
    with pytest.raises(NotFoundError):
        service.delete(contract.id)


def test_describe_document_counts_pdf_pages(example_pdf):
    info = describe_document(example_pdf, "lease.pdf", "application/pdf")
    assert info["pages"] == 1
    assert info["size"] == len(example_pdf)

    assert describe_document(b"not a pdf", "notes.txt", "text/plain")["pages"] is None
    assert describe_document(b"broken", "broken.pdf", "application/pdf")["pages"] is None
