"""
Redbard IDM - Models
"""

from idm.models.user import User, UserRole

__all__ = ["User", "UserRole"]
