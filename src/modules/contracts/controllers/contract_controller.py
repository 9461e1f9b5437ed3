# src/modules/contracts/controllers/contract_controller.py
import json
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile, status
from pydantic import EmailStr, TypeAdapter, ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from core.config import settings
from core.exceptions import ValidationError
from modules.auth.dependencies import get_current_user
from modules.contracts.dependencies import get_contract_service
from modules.contracts.schemas.contract_schemas import (
    ContractCreated,
    ContractCreatedEnvelope,
    ContractEnvelope,
    ContractListEnvelope,
    ContractPageEnvelope,
    DocumentInfo,
    MessageResponse,
    VerifiedUserEnvelope,
    VerifyUserRequest,
)
from modules.contracts.services.contract_service import ContractService, describe_document
from modules.users.models.user import User

router = APIRouter(
    prefix="/contracts",
    tags=["contracts"],
    dependencies=[Depends(get_current_user)],
)

signer_emails_adapter = TypeAdapter(List[EmailStr])


def parse_signer_emails(raw: Optional[str]) -> List[str]:
    """`signers` arrives as a JSON encoded array of email addresses."""
    if not raw:
        return []
    try:
        return [str(email) for email in signer_emails_adapter.validate_python(json.loads(raw))]
    except (json.JSONDecodeError, PydanticValidationError) as exc:
        raise ValidationError("signers must be a JSON array of email addresses") from exc


@router.post("/verify-user", response_model=VerifiedUserEnvelope)
def verify_user(
    payload: VerifyUserRequest,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    user = service.verify_user(current_user.id, payload.wallet_address)
    return {"message": "User verified successfully", "user": user}


@router.post("", response_model=ContractCreatedEnvelope, status_code=status.HTTP_201_CREATED)
async def create_contract(
    background_tasks: BackgroundTasks,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    transaction_hash: Optional[str] = Form(None, alias="transactionHash"),
    wallet_address: Optional[str] = Form(None, alias="walletAddress"),
    signers: Optional[str] = Form(None),
    document: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """
    Create a draft contract from a multipart upload and link its signers.
    Invitations go out once the response has been sent.
    """
    signer_emails = parse_signer_emails(signers)

    contents = await document.read() if document is not None else None
    if contents is not None and len(contents) > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(f"The maximum document size is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)} MB")

    document_info = None
    if document is not None:
        document_info = DocumentInfo(**describe_document(contents, document.filename, document.content_type))

    contract = await run_in_threadpool(
        service.create,
        current_user.id,
        wallet_address,
        name,
        description,
        type,
        contents,
        transaction_hash,
        signer_emails,
    )
    background_tasks.add_task(service.notifier.flush)

    payload = ContractCreated.model_validate(contract)
    payload.document_info = document_info
    return {"message": "Contract created successfully", "contract": payload}


@router.get("", response_model=ContractPageEnvelope)
def list_contracts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    contract_status: Optional[str] = Query(None, alias="status"),
    created_by: Optional[int] = Query(None, alias="createdBy"),
    service: ContractService = Depends(get_contract_service),
):
    result = service.get_all(page=page, limit=limit, status=contract_status, created_by=created_by)
    return {
        "message": "Contracts retrieved successfully",
        "contracts": result.items,
        "pagination": {
            "page": result.page,
            "limit": result.limit,
            "total": result.total,
            "pages": result.pages,
        },
    }


@router.get("/transaction/{transaction_hash}", response_model=ContractEnvelope)
def get_contract_by_transaction_hash(
    transaction_hash: str,
    service: ContractService = Depends(get_contract_service),
):
    contract = service.get_by_transaction_hash(transaction_hash)
    return {"message": "Contract retrieved successfully", "contract": contract}


@router.get("/users/{user_id}", response_model=ContractListEnvelope)
def get_contracts_by_user(
    user_id: int,
    service: ContractService = Depends(get_contract_service),
):
    """Contracts the user created or has been asked to sign"""
    contracts = service.get_by_user_id(user_id)
    return {"message": "Contracts retrieved successfully", "contracts": contracts}


@router.get("/{contract_id}", response_model=ContractEnvelope)
def get_contract(
    contract_id: int,
    service: ContractService = Depends(get_contract_service),
):
    contract = service.get_by_id(contract_id)
    return {"message": "Contract retrieved successfully", "contract": contract}


@router.delete("/{contract_id}", response_model=MessageResponse)
def delete_contract(
    contract_id: int,
    service: ContractService = Depends(get_contract_service),
):
    service.delete(contract_id)
    return {"message": "Contract deleted successfully"}
