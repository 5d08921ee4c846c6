"""
Redbard IDM - Core Module
"""

from idm.core.config import settings
from idm.core.database import get_db, init_db, close_db

__all__ = [
    "settings",
    "get_db",
    "init_db",
    "close_db",
]
