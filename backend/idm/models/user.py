"""
Redbard IDM - User Models
"""

from datetime import datetime
import enum

from sqlalchemy import Column, DateTime, JSON, String

from idm.core.database import Base


class UserRole(str, enum.Enum):
    """Roles a user can hold; a user may hold several"""
    ADMIN = "ROLE_ADMIN"
    CLIENT = "ROLE_CLIENT"


class User(Base):
    """Registered user"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)

    # Stored as lists of plain values
    roles = Column(JSON, nullable=False, default=list)
    social_links = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<User {self.username} {self.roles}>"
