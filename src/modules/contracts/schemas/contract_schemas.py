import base64
from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from modules.auth.schemas.auth_schemas import CamelModel
from modules.contracts.models import ContractStatus, SignerStatus
from modules.users.schemas.user_schemas import UserSummary


class ContractSignerResponse(CamelModel):
    contract_id: int
    user_id: int
    status: SignerStatus
    signed_at: Optional[datetime] = None
    transaction_hash: Optional[str] = None
    parent_transaction_hash: Optional[str] = None
    created_at: datetime
    user: UserSummary


class ContractBrief(CamelModel):
    id: int
    name: str
    type: str


class ContractSignerDetail(ContractSignerResponse):
    contract: ContractBrief


class DocumentInfo(CamelModel):
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    size: int
    pages: Optional[int] = None


class ContractSummary(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    type: str
    transaction_hash: str
    status: ContractStatus
    created_by: int
    created_at: datetime
    creator: UserSummary
    signers: List[ContractSignerResponse] = []


class ContractResponse(ContractSummary):
    document: str

    @field_validator("document", mode="before")
    @classmethod
    def encode_document(cls, value):
        # Binary blobs travel as base64 text in JSON
        if isinstance(value, (bytes, bytearray, memoryview)):
            return base64.b64encode(bytes(value)).decode("ascii")
        return value


class ContractCreated(ContractSummary):
    document_info: Optional[DocumentInfo] = None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class VerifyUserRequest(CamelModel):
    wallet_address: str


class AddSignerRequest(CamelModel):
    user_id: int


class SignContractRequest(CamelModel):
    transaction_hash: str
    parent_transaction_hash: Optional[str] = None


# Envelopes: every successful response carries a human readable message.

class MessageResponse(CamelModel):
    message: str


class VerifiedUserEnvelope(MessageResponse):
    user: UserSummary


class ContractCreatedEnvelope(MessageResponse):
    contract: ContractCreated


class ContractEnvelope(MessageResponse):
    contract: ContractResponse


class ContractListEnvelope(MessageResponse):
    contracts: List[ContractResponse]


class ContractPageEnvelope(ContractListEnvelope):
    pagination: Pagination


class ContractSignerEnvelope(MessageResponse):
    contract_signer: ContractSignerDetail


class SignerListEnvelope(MessageResponse):
    signers: List[ContractSignerResponse]


class SignerStatusEnvelope(MessageResponse):
    signer: ContractSignerResponse
