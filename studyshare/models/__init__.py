"""
All database models. Imported here so Base.metadata sees them for create_all().
"""

from .base import RecordBase
from .user import User
from .document import Document, DocumentType, DocumentStatus, Medium
from .failed_search import FailedSearch

__all__ = [
    "RecordBase",
    "User",
    "Document", "DocumentType", "DocumentStatus", "Medium",
    "FailedSearch",
]
