"""
Redbard IDM - User Service
Business logic and persistence for user management
"""

import uuid
from typing import List, Optional
from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from idm.auth.security import create_access_token, get_password_hash, verify_password
from idm.core.database import get_db
from idm.core.exceptions import AccessDeniedError, BadRequestError, UsernameInUseError
from idm.models.user import User, UserRole
from idm.schemas.user import SocialLinkDTO, UserDTO


class UserService:
    """Service for user operations, bound to one database session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def to_dto(user: User) -> UserDTO:
        return UserDTO(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            roles=[UserRole(r) for r in user.roles or []],
            social_links=[SocialLinkDTO(**link) for link in user.social_links or []],
        )

    async def get_all_users(self, page: int, size: int) -> List[UserDTO]:
        """Return one page of users ordered by username"""
        result = await self.db.execute(
            select(User).order_by(User.username).offset(page * size).limit(size)
        )
        return [self.to_dto(user) for user in result.scalars().all()]

    async def get_total_count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(User))
        return result.scalar_one()

    async def get_user_by_id(self, user_id: str) -> Optional[UserDTO]:
        user = await self.db.get(User, user_id)
        return self.to_dto(user) if user else None

    async def _username_taken(self, username: str, exclude_id: Optional[str] = None) -> bool:
        query = select(User.id).where(User.username == username)
        if exclude_id:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def create_user(self, user_dto: UserDTO) -> UserDTO:
        """
        Create new user

        Raises:
            BadRequestError: If username or password is missing
            UsernameInUseError: If the username already exists
        """
        missing = [name for name in ("username", "password") if not getattr(user_dto, name)]
        if missing:
            raise BadRequestError(f"Missing required fields: {', '.join(missing)}", missing)

        if await self._username_taken(user_dto.username):
            raise UsernameInUseError(user_dto.username)

        user = User(
            id=str(uuid.uuid4()),
            username=user_dto.username,
            email=user_dto.email,
            hashed_password=get_password_hash(user_dto.password),
            first_name=user_dto.first_name,
            last_name=user_dto.last_name,
            roles=[r.value for r in (user_dto.roles or [UserRole.CLIENT])],
            social_links=[link.to_dict() for link in user_dto.social_links or []],
        )

        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same username
            await self.db.rollback()
            logger.error(f"User creation failed: {e}")
            raise UsernameInUseError(user_dto.username)
        await self.db.refresh(user)

        logger.info(f"User created: {user.username} {user.roles}")
        return self.to_dto(user)

    async def update_user(self, user_id: str, user_dto: UserDTO) -> Optional[UserDTO]:
        """
        Apply the fields that were sent to an existing user

        Returns:
            Updated user, or None if no user has that id
        """
        user = await self.db.get(User, user_id)
        if user is None:
            return None

        changes = user_dto.model_dump(exclude_unset=True, exclude={"id", "token", "password"})

        new_username = changes.get("username")
        if new_username and new_username != user.username:
            if await self._username_taken(new_username, exclude_id=user_id):
                raise UsernameInUseError(new_username)

        for field in ("username", "email", "first_name", "last_name"):
            if field in changes and changes[field] is not None:
                setattr(user, field, changes[field])
        if user_dto.roles is not None:
            user.roles = [r.value for r in user_dto.roles]
        if user_dto.social_links is not None:
            user.social_links = [link.to_dict() for link in user_dto.social_links]
        if user_dto.password:
            user.hashed_password = get_password_hash(user_dto.password)

        try:
            await self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent rename onto the same username
            await self.db.rollback()
            logger.error(f"User update failed: {e}")
            raise UsernameInUseError(new_username or user_dto.username)
        await self.db.refresh(user)

        logger.info(f"User updated: {user.username}")
        return self.to_dto(user)

    async def authenticate_user(self, username: str, password: str) -> UserDTO:
        """
        Check credentials and issue an access token

        Raises:
            AccessDeniedError: If the user is unknown or the password is wrong
        """
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed sign-in for {username}")
            raise AccessDeniedError("Invalid username/password supplied")

        user_dto = self.to_dto(user)
        user_dto.token = create_access_token({
            "sub": user.id,
            "username": user.username,
            "roles": list(user.roles or []),
        })

        logger.info(f"User signed in: {user.username}")
        return user_dto


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """FastAPI dependency providing the user service"""
    return UserService(db)
