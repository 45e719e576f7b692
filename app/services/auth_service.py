# app/services/auth_service.py
import logging

from sqlmodel import Session

from app.core.errors import UnauthorizedError, ValidationError
from app.core.identity import AuthenticatedCaller
from app.core.security import (
    TokenError,
    create_token_pair,
    decode_refresh_token,
    verify_password,
)
from app.repositories.user_repo import UserRepository
from app.schemas.cart import CartRead
from app.schemas.user import LoginData, LoginRequest, TokenPair, UserRead
from app.services.cart_service import CartService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Login and token refresh.

    Responsibilities:
      - verify credentials (bcrypt) and issue a token pair
      - fold a guest cart into the user's cart at login, best-effort
      - exchange a refresh token for a fresh pair
    """

    def __init__(self, user_repo: UserRepository, cart_service: CartService):
        self.user_repo = user_repo
        self.cart_service = cart_service

    def _merge_best_effort(
        self, session: Session, caller: AuthenticatedCaller, guest_id: str
    ) -> CartRead | None:
        try:
            return self.cart_service.merge_guest_cart(session, caller, guest_id)
        except Exception:
            session.rollback()
            logger.warning(
                "Guest cart merge failed for user %s (guest %s)",
                caller.user_id,
                guest_id,
                exc_info=True,
            )
            return None

    def login(
        self,
        session: Session,
        payload: LoginRequest,
        guest_id: str | None = None,
    ) -> LoginData:
        """
        Authenticate by email/password.

        `guest_id` from the body wins over the one resolved from the header.
        Login never fails because of the merge; `cart` is then just None.

        Raises:
            ValidationError(400): unknown email, wrong password, or the
            account was deleted.
        """
        user = self.user_repo.get_by_email(session, payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            raise ValidationError("Invalid email or password")

        caller = AuthenticatedCaller(user_id=user.user_id, email=user.email, role=user.role)
        user_read = UserRead.model_validate(user)
        tokens = TokenPair(**create_token_pair(user.user_id, user.email, user.role))

        cart = None
        guest_id = payload.guest_id or guest_id
        if guest_id:
            cart = self._merge_best_effort(session, caller, guest_id)

        return LoginData(user=user_read, tokens=tokens, cart=cart)

    def refresh(self, session: Session, refresh_token: str | None) -> TokenPair:
        if not refresh_token:
            raise ValidationError("Refresh token is required")

        try:
            payload = decode_refresh_token(refresh_token)
        except TokenError as exc:
            raise UnauthorizedError(str(exc)) from exc

        user = self.user_repo.get_by_id(session, payload["user_id"])
        if user is None:
            raise UnauthorizedError("User not found or account has been deleted")

        return TokenPair(**create_token_pair(user.user_id, user.email, user.role))
