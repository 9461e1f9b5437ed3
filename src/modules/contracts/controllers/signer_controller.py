# src/modules/contracts/controllers/signer_controller.py
from fastapi import APIRouter, BackgroundTasks, Depends, status

from core.exceptions import AuthorizationError
from modules.auth.dependencies import get_current_user
from modules.contracts.dependencies import get_signer_service
from modules.contracts.schemas.contract_schemas import (
    AddSignerRequest,
    ContractSignerEnvelope,
    MessageResponse,
    SignContractRequest,
    SignerListEnvelope,
    SignerStatusEnvelope,
)
from modules.contracts.services.signer_service import SignerService
from modules.users.models.user import User

router = APIRouter(
    prefix="/contracts",
    tags=["signers"],
    dependencies=[Depends(get_current_user)],
)


@router.post("/{contract_id}/signers", response_model=ContractSignerEnvelope,
             status_code=status.HTTP_201_CREATED)
def add_signer(
    contract_id: int,
    payload: AddSignerRequest,
    service: SignerService = Depends(get_signer_service),
):
    signer = service.add_signer(contract_id, payload.user_id)
    return {"message": "Signer added successfully", "contract_signer": signer}


@router.delete("/{contract_id}/signers/{user_id}", response_model=MessageResponse)
def remove_signer(
    contract_id: int,
    user_id: int,
    service: SignerService = Depends(get_signer_service),
):
    """Deletes the signer slot in any state; its signature data is not kept."""
    service.remove_signer(contract_id, user_id)
    return {"message": "Signer removed successfully"}


@router.post("/{contract_id}/signers/{user_id}/sign", response_model=ContractSignerEnvelope)
def sign_contract(
    contract_id: int,
    user_id: int,
    payload: SignContractRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: SignerService = Depends(get_signer_service),
):
    """
    Records a signature anchored to the given transaction hash.
    A slot can be signed once; a second call answers 409.
    """
    if current_user.id != user_id:
        raise AuthorizationError("Forbidden: only the signer can sign their own slot")

    signer = service.sign(
        contract_id, user_id, payload.transaction_hash, payload.parent_transaction_hash
    )
    background_tasks.add_task(service.notifier.flush)
    return {"message": "Contract signed successfully", "contract_signer": signer}


@router.get("/{contract_id}/signers", response_model=SignerListEnvelope)
def list_signers(
    contract_id: int,
    service: SignerService = Depends(get_signer_service),
):
    signers = service.get_contract_signers(contract_id)
    return {"message": "Contract signers retrieved successfully", "signers": signers}


@router.get("/{contract_id}/signers/{user_id}", response_model=SignerStatusEnvelope)
def get_signer_status(
    contract_id: int,
    user_id: int,
    service: SignerService = Depends(get_signer_service),
):
    signer = service.get_signer(contract_id, user_id)
    return {"message": "Signer status retrieved successfully", "signer": signer}
