"""
Failed searches — one counter row per normalized query, reviewed by admins
to find material students are looking for but can't get.
"""

from datetime import datetime

from sqlalchemy import String, Text, Integer, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class FailedSearch(RecordBase):
    __tablename__ = "failed_searches"

    query: Mapped[str] = mapped_column(Text, nullable=False)  # last seen casing
    normalized_query: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    subject: Mapped[str] = mapped_column(String, nullable=True)
    medium: Mapped[str] = mapped_column(String, nullable=True)
    document_type: Mapped[str] = mapped_column(String, nullable=True)
    search_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    resolved_document_id: Mapped[str] = mapped_column(String, nullable=True)
    last_searched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
