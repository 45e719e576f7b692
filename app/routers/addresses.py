# app/routers/addresses.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.dependencies import get_address_service
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.user import AddressCreate, AddressRead
from app.services.address_service import AddressService

router = APIRouter(prefix="/addresses", tags=["Addresses"])


@router.get("", response_model=ApiResponse[list[AddressRead]])
def list_addresses(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    service: AddressService = Depends(get_address_service),
):
    """
    The caller's saved addresses, default first.
    """
    addresses = service.list_addresses(session, current_user.user_id)
    return ApiResponse(
        message="Addresses retrieved successfully",
        data=[AddressRead.model_validate(a) for a in addresses],
    )


@router.get("/default", response_model=ApiResponse[AddressRead])
def get_default_address(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    service: AddressService = Depends(get_address_service),
):
    address = service.get_default(session, current_user.user_id)
    return ApiResponse(
        message="Default address retrieved successfully",
        data=AddressRead.model_validate(address),
    )


@router.post(
    "",
    response_model=ApiResponse[AddressRead],
    status_code=status.HTTP_201_CREATED,
)
def add_address(
    payload: AddressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    service: AddressService = Depends(get_address_service),
):
    """
    Save a new address. With is_default=true it replaces the current default.
    """
    address = service.add_address(session, current_user.user_id, payload)
    return ApiResponse(
        message="Address added successfully",
        data=AddressRead.model_validate(address),
    )


@router.put("/{address_id}/set-default", response_model=ApiResponse[AddressRead])
def set_default_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    service: AddressService = Depends(get_address_service),
):
    address = service.set_default(session, current_user.user_id, address_id)
    return ApiResponse(
        message="Default address updated",
        data=AddressRead.model_validate(address),
    )


@router.delete("/{address_id}", response_model=ApiResponse[None])
def delete_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    service: AddressService = Depends(get_address_service),
):
    service.delete_address(session, current_user.user_id, address_id)
    return ApiResponse(message="Address deleted successfully")
