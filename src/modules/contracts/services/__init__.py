from .contract_service import ContractService, ContractPage, describe_document
from .provisioning import provision_signer, ProvisionedSigner
from .signer_service import SignerService

__all__ = [
    'ContractService', 'ContractPage', 'describe_document',
    'provision_signer', 'ProvisionedSigner', 'SignerService'
]
