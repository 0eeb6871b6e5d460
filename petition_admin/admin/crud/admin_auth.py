"""CRUD operations for the admin credential and admin sessions."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from petition_admin.models.admin_auth import (
    ADMIN_USER_ID,
    PASSWORD_HASH_USER_ID,
    AdminCredential,
    AdminSession,
)


class AdminCredentialCRUD:
    """CRUD operations for the stored admin password digest."""

    async def get(self, db: AsyncSession) -> Optional[AdminCredential]:
        """Get the stored credential, if any."""
        result = await db.execute(select(AdminCredential).order_by(AdminCredential.id))  # type: ignore
        return result.scalars().first()

    async def replace(self, db: AsyncSession, password_hash: str) -> AdminCredential:
        """Drop any stored credentials and store ``password_hash`` as the only one."""
        result = await db.execute(select(AdminCredential))
        for stale in result.scalars().all():
            await db.delete(stale)

        credential = AdminCredential(password_hash=password_hash)
        db.add(credential)
        await db.commit()
        await db.refresh(credential)
        return credential

    async def delete_all(self, db: AsyncSession) -> int:
        """Delete every stored credential."""
        result = await db.execute(select(AdminCredential))
        credentials = list(result.scalars().all())

        for credential in credentials:
            await db.delete(credential)

        if credentials:
            await db.commit()

        return len(credentials)


class AdminSessionCRUD:
    """CRUD operations for admin sessions."""

    async def create_session(
        self,
        db: AsyncSession,
        session_token: str,
        expires_at: int,
        user_id: str = ADMIN_USER_ID,
    ) -> AdminSession:
        """Create a new admin session."""
        if user_id == PASSWORD_HASH_USER_ID:
            raise ValueError(f"'{PASSWORD_HASH_USER_ID}' is reserved and cannot own a session")

        session = AdminSession(
            session_token=session_token,
            user_id=user_id,
            expires_at=expires_at,
        )

        db.add(session)
        await db.commit()
        await db.refresh(session)
        return session

    async def get_by_token(self, db: AsyncSession, session_token: str) -> Optional[AdminSession]:
        """Get a session by token, expired or not."""
        result = await db.execute(select(AdminSession).where(AdminSession.session_token == session_token))  # type: ignore
        return result.scalar_one_or_none()

    async def list_all(self, db: AsyncSession) -> List[AdminSession]:
        """List all sessions."""
        result = await db.execute(select(AdminSession).order_by(AdminSession.id))  # type: ignore
        return list(result.scalars().all())

    async def list_by_user_id(self, db: AsyncSession, user_id: str) -> List[AdminSession]:
        """List the sessions belonging to ``user_id``."""
        result = await db.execute(
            select(AdminSession).where(AdminSession.user_id == user_id).order_by(AdminSession.id)  # type: ignore
        )
        return list(result.scalars().all())

    async def delete_by_id(self, db: AsyncSession, session_id: int) -> bool:
        """Delete a session by primary key."""
        session = await db.get(AdminSession, session_id)
        if session is None:
            return False

        await db.delete(session)
        await db.commit()
        return True

    async def delete_by_token(self, db: AsyncSession, session_token: str) -> bool:
        """Delete a session (logout)."""
        session = await self.get_by_token(db, session_token)

        if session:
            await db.delete(session)
            await db.commit()
            return True

        return False

    async def delete_all(self, db: AsyncSession) -> int:
        """Delete every session."""
        sessions = await self.list_all(db)

        for session in sessions:
            await db.delete(session)

        if sessions:
            await db.commit()

        return len(sessions)


admin_credential_crud = AdminCredentialCRUD()
admin_session_crud = AdminSessionCRUD()
