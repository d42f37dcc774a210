"""
User repository.

Data access for accounts, seller verification documents and registration codes.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from dressla.core.models.domain.enums import Role, VerificationStatus

from ..entities.catalog import Product
from ..entities.orders import Order
from ..entities.users import RegistrationCode, User, VerificationDocument
from .base import SQLModelRepository


class UserRepository(SQLModelRepository[User]):
    """Repository for user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def email_taken(self, email: str, exclude_user_id: Optional[str] = None) -> bool:
        stmt = select(User.id).where(func.lower(User.email) == email.lower())
        if exclude_user_id:
            stmt = stmt.where(User.id != exclude_user_id)
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def list_users(self, search: Optional[str] = None) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc())  # type: ignore[attr-defined]
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(func.lower(User.email).like(pattern) | func.lower(User.name).like(pattern))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_role(self, role: Role) -> int:
        return await self.count({"role": role})

    async def product_counts(self, user_ids: List[str]) -> dict[str, int]:
        if not user_ids:
            return {}
        stmt = (
            select(Product.user_id, func.count(Product.id))
            .where(Product.user_id.in_(user_ids))  # type: ignore[union-attr]
            .group_by(Product.user_id)
        )
        result = await self.session.execute(stmt)
        return {user_id: count for user_id, count in result.all()}

    async def order_counts(self, user_ids: List[str]) -> dict[str, int]:
        if not user_ids:
            return {}
        stmt = (
            select(Order.user_id, func.count(Order.id))
            .where(Order.user_id.in_(user_ids))  # type: ignore[union-attr]
            .group_by(Order.user_id)
        )
        result = await self.session.execute(stmt)
        return {user_id: count for user_id, count in result.all()}

    # Verification documents

    async def get_verification(self, user_id: str) -> Optional[VerificationDocument]:
        stmt = select(VerificationDocument).where(VerificationDocument.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_verifications(self, user_ids: List[str]) -> dict[str, VerificationDocument]:
        if not user_ids:
            return {}
        stmt = select(VerificationDocument).where(VerificationDocument.user_id.in_(user_ids))  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return {document.user_id: document for document in result.scalars().all()}

    async def upsert_verification(
        self,
        user_id: str,
        id_front_url: Optional[str],
        id_back_url: Optional[str],
        entrepreneur_certificate_url: Optional[str],
    ) -> VerificationDocument:
        """Store newly uploaded documents and send both reviews back to PENDING.

        Fields passed as ``None`` keep their stored value.
        """
        document = await self.get_verification(user_id)
        if document is None:
            document = VerificationDocument(user_id=user_id)
        if id_front_url is not None:
            document.id_front_url = id_front_url
        if id_back_url is not None:
            document.id_back_url = id_back_url
        if entrepreneur_certificate_url is not None:
            document.entrepreneur_certificate_url = entrepreneur_certificate_url
        document.identity_status = VerificationStatus.PENDING
        document.identity_comment = None
        document.entrepreneur_status = VerificationStatus.PENDING
        document.entrepreneur_comment = None
        document.updated_at = datetime.utcnow()
        self.session.add(document)
        await self.session.flush()
        return document

    # Registration codes

    async def replace_registration_code(self, email: str, code: str, expires_at: datetime) -> RegistrationCode:
        """Drop earlier codes for ``email`` and store a new one."""
        await self.session.execute(delete(RegistrationCode).where(RegistrationCode.email == email.lower()))
        record = RegistrationCode(email=email.lower(), code=code, expires_at=expires_at)
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def latest_registration_code(self, email: str) -> Optional[RegistrationCode]:
        stmt = (
            select(RegistrationCode)
            .where(RegistrationCode.email == email.lower())
            .order_by(RegistrationCode.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def delete_registration_codes(self, email: str) -> None:
        await self.session.execute(delete(RegistrationCode).where(RegistrationCode.email == email.lower()))
