"""
Redbard IDM - Auth Module
"""

from idm.auth.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    decode_token,
    has_any_role,
)
from idm.auth.dependencies import (
    get_current_user,
    require_roles,
    require_admin,
    require_admin_or_client,
)

__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "decode_token",
    "has_any_role",
    "get_current_user",
    "require_roles",
    "require_admin",
    "require_admin_or_client",
]
