from .contract import Contract, ContractStatus
from .contract_signer import ContractSigner, SignerStatus

__all__ = ['Contract', 'ContractStatus', 'ContractSigner', 'SignerStatus']
