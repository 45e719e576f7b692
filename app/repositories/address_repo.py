# app/repositories/address_repo.py
from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import Session, select

from app.models.user import UserAddress


class AddressRepository:
    """
    Data access layer for user_addresses.

    NOTE:
      - No commits here; "clear defaults then set one" must run in a
        single transaction owned by the service.
    """

    def list_for_user(self, session: Session, user_id: int) -> list[UserAddress]:
        stmt = (
            select(UserAddress)
            .where(UserAddress.user_id == user_id, UserAddress.is_deleted == False)
            .order_by(UserAddress.is_default.desc(), UserAddress.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def get_default(self, session: Session, user_id: int) -> UserAddress | None:
        stmt = (
            select(UserAddress)
            .where(
                UserAddress.user_id == user_id,
                UserAddress.is_deleted == False,
                UserAddress.is_default == True,
            )
            .order_by(UserAddress.address_id)
        )
        return session.exec(stmt).first()

    def get_live(
        self, session: Session, user_id: int, address_id: int
    ) -> UserAddress | None:
        stmt = select(UserAddress).where(
            UserAddress.address_id == address_id,
            UserAddress.user_id == user_id,
            UserAddress.is_deleted == False,
        )
        return session.exec(stmt).first()

    def create(self, session: Session, address: UserAddress) -> UserAddress:
        session.add(address)
        session.flush()
        return address

    def clear_defaults(self, session: Session, user_id: int) -> None:
        stmt = (
            update(UserAddress)
            .where(UserAddress.user_id == user_id, UserAddress.is_deleted == False)
            .values(is_default=False)
        )
        session.exec(stmt)

    def set_default(self, session: Session, user_id: int, address_id: int) -> bool:
        stmt = (
            update(UserAddress)
            .where(
                UserAddress.address_id == address_id,
                UserAddress.user_id == user_id,
                UserAddress.is_deleted == False,
            )
            .values(is_default=True)
        )
        return session.exec(stmt).rowcount > 0

    def soft_delete(self, session: Session, user_id: int, address_id: int) -> bool:
        stmt = (
            update(UserAddress)
            .where(
                UserAddress.address_id == address_id,
                UserAddress.user_id == user_id,
                UserAddress.is_deleted == False,
            )
            .values(
                is_deleted=True,
                is_default=False,
                deleted_at=datetime.now(timezone.utc),
            )
        )
        return session.exec(stmt).rowcount > 0
