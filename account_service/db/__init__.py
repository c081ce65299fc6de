"""Database module.

This module provides the store handle and the request-scoped session dependency.
"""

from account_service.db.session import Database, get_db

__all__ = [
    "Database",
    "get_db",
]
