"""
Redbard IDM - Auth Dependencies
FastAPI dependencies for authentication and authorization
"""

from typing import Optional, Iterable
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from loguru import logger
from pydantic import ValidationError
from idm.models.user import UserRole
from idm.auth.security import decode_token, verify_token_type, has_any_role
from idm.schemas.user import TokenData

# HTTP Bearer token scheme; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenData:
    """
    Build the caller identity from the bearer token claims

    No database lookup happens here: the role set travels in the token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    if not verify_token_type(payload, "access"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return TokenData(
            user_id=payload.get("sub"),
            username=payload.get("username"),
            roles=payload.get("roles", []),
        )
    except ValidationError:
        raise credentials_exception


# Role-based access control dependencies
class RoleChecker:
    """Dependency for checking that the caller holds one of a set of roles"""

    def __init__(self, allowed_roles: Iterable[UserRole]):
        self.allowed_roles = frozenset(allowed_roles)

    async def __call__(
        self,
        current_user: TokenData = Depends(get_current_user)
    ) -> TokenData:
        if not has_any_role(current_user.roles, self.allowed_roles):
            logger.warning(
                f"Access denied for {current_user.username}: "
                f"has {[r.value for r in current_user.roles]}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required one of: {sorted(r.value for r in self.allowed_roles)}",
            )
        return current_user


def require_roles(*roles: UserRole) -> RoleChecker:
    """Create a role checker accepting any of the given roles"""
    return RoleChecker(roles)


require_admin = require_roles(UserRole.ADMIN)
require_admin_or_client = require_roles(UserRole.ADMIN, UserRole.CLIENT)
