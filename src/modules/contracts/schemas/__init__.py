from .contract_schemas import (
    AddSignerRequest, ContractBrief, ContractCreated, ContractCreatedEnvelope,
    ContractEnvelope, ContractListEnvelope, ContractPageEnvelope, ContractResponse,
    ContractSignerDetail, ContractSignerEnvelope, ContractSignerResponse,
    ContractSummary, DocumentInfo, MessageResponse, Pagination, SignContractRequest,
    SignerListEnvelope, SignerStatusEnvelope, VerifiedUserEnvelope, VerifyUserRequest
)

__all__ = [
    'AddSignerRequest', 'ContractBrief', 'ContractCreated', 'ContractCreatedEnvelope',
    'ContractEnvelope', 'ContractListEnvelope', 'ContractPageEnvelope', 'ContractResponse',
    'ContractSignerDetail', 'ContractSignerEnvelope', 'ContractSignerResponse',
    'ContractSummary', 'DocumentInfo', 'MessageResponse', 'Pagination', 'SignContractRequest',
    'SignerListEnvelope', 'SignerStatusEnvelope', 'VerifiedUserEnvelope', 'VerifyUserRequest'
]
