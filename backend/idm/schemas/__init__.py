"""
Redbard IDM - Schemas
"""

from idm.schemas.user import UserDTO, AuthRequestDTO, SocialLinkDTO, TokenData

__all__ = ["UserDTO", "AuthRequestDTO", "SocialLinkDTO", "TokenData"]
