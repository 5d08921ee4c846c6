"""
Redbard IDM - User Schemas
Pydantic data-transfer objects for the users API
"""

from typing import ClassVar, Optional, List
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from idm.models.user import UserRole


class SocialLinkDTO(BaseModel):
    """
    Labeled external link attached to a user (e.g. a profile URL)

    Absent fields are left out of serialized output.
    """
    model_config = ConfigDict(from_attributes=True)

    collection_relation: ClassVar[str] = "socialLinks"
    item_relation: ClassVar[str] = "socialLink"

    id: Optional[str] = None
    value: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


class UserDTO(BaseModel):
    """User record exchanged with API clients"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    collection_relation: ClassVar[str] = "users"
    item_relation: ClassVar[str] = "user"

    id: Optional[str] = None
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    # Accepted on input, never serialized
    password: Optional[str] = Field(None, min_length=1, max_length=72, exclude=True)
    roles: Optional[List[UserRole]] = None
    social_links: Optional[List[SocialLinkDTO]] = None
    token: Optional[str] = None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AuthRequestDTO(BaseModel):
    """Sign-in request"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenData(BaseModel):
    """JWT token payload data identifying the caller"""
    user_id: str
    username: str
    roles: List[UserRole] = []
