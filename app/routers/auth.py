# app/routers/auth.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import resolve_optional_caller
from app.core.identity import CallerIdentity, GuestCaller
from app.database import get_session
from app.dependencies import get_auth_service
from app.schemas.common import ApiResponse
from app.schemas.user import LoginData, LoginRequest, RefreshRequest, TokenPair
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=ApiResponse[LoginData])
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    caller: CallerIdentity | None = Depends(resolve_optional_caller),
    service: AuthService = Depends(get_auth_service),
):
    """
    Exchange email/password for a token pair.

    A guest id (body `guest_id` or X-Guest-Id header) triggers a best-effort
    merge of that guest's cart into the user's cart.
    """
    guest_id = caller.guest_id if isinstance(caller, GuestCaller) else None
    data = service.login(session, payload, guest_id)

    message = "Login successful"
    if data.cart is not None:
        message = "Login successful (guest cart merged)"
    return ApiResponse(message=message, data=data)


@router.post("/refresh", response_model=ApiResponse[TokenPair])
def refresh_tokens(
    payload: RefreshRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    return ApiResponse(
        message="Token refreshed successfully",
        data=service.refresh(session, payload.refreshToken),
    )
