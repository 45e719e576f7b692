# app/services/address_service.py
from sqlmodel import Session

from app.core.errors import NotFoundError
from app.database import transaction
from app.models.user import UserAddress
from app.repositories.address_repo import AddressRepository
from app.schemas.user import AddressCreate


class AddressService:
    """
    Saved shipping addresses.

    Only one live address per user is the default: every change of default
    clears all of them first, inside the same transaction.
    """

    def __init__(self, repo: AddressRepository):
        self.repo = repo

    def list_addresses(self, session: Session, user_id: int) -> list[UserAddress]:
        return self.repo.list_for_user(session, user_id)

    def get_default(self, session: Session, user_id: int) -> UserAddress:
        address = self.repo.get_default(session, user_id)
        if address is None:
            raise NotFoundError("No default address found")
        return address

    def add_address(
        self, session: Session, user_id: int, payload: AddressCreate
    ) -> UserAddress:
        with transaction(session):
            if payload.is_default:
                self.repo.clear_defaults(session, user_id)
            address = self.repo.create(
                session,
                UserAddress(user_id=user_id, **payload.model_dump()),
            )
        session.refresh(address)
        return address

    def set_default(self, session: Session, user_id: int, address_id: int) -> UserAddress:
        with transaction(session):
            if self.repo.get_live(session, user_id, address_id) is None:
                raise NotFoundError("Address not found")
            self.repo.clear_defaults(session, user_id)
            self.repo.set_default(session, user_id, address_id)

        return self.repo.get_live(session, user_id, address_id)

    def delete_address(self, session: Session, user_id: int, address_id: int) -> None:
        with transaction(session):
            if not self.repo.soft_delete(session, user_id, address_id):
                raise NotFoundError("Address not found")
