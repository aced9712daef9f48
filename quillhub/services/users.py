"""Per-tenant user lookups and registration.

Every function takes the connection of the tenant database it should act
on; callers decide which tenant that is.
"""

from sqlalchemy import or_
from sqlmodel import select

from quillhub.core.database import ConnectionHandle
from quillhub.core.errors import EmailTaken, InvalidLogin, UsernameTaken
from quillhub.core.security import hash_password, verify_password
from quillhub.models.base import utcnow
from quillhub.models.user import User, UserCreate, UserRole


async def find_by_id(connection: ConnectionHandle, user_id: str) -> User | None:
    async with connection.session() as session:
        return await session.get(User, user_id)


async def register(
    connection: ConnectionHandle,
    body: UserCreate,
    *,
    role: UserRole = UserRole.READER,
    user_id: str | None = None,
) -> User:
    async with connection.session() as session:
        result = await session.execute(select(User.id).where(User.email == body.email))
        if result.first() is not None:
            raise EmailTaken()
        result = await session.execute(select(User.id).where(User.username == body.username))
        if result.first() is not None:
            raise UsernameTaken()

        user = User(
            email=body.email,
            username=body.username,
            password_hash=hash_password(body.password),
            display_name=body.display_name or body.username,
            role=role,
        )
        if user_id is not None:
            user.id = user_id
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


async def authenticate(
    connection: ConnectionHandle, username_or_email: str, password: str
) -> User:
    """Check a login against one tenant database and stamp ``last_login_at``."""
    async with connection.session() as session:
        stmt = select(User).where(
            or_(User.email == username_or_email, User.username == username_or_email)
        )
        result = await session.execute(stmt)
        user = result.scalars().first()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidLogin()
        if not user.is_active:
            raise InvalidLogin("Account is disabled")

        user.last_login_at = utcnow()
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user
