"""
Documents — uploaded study files. Only approved documents are searchable.
"""

from enum import Enum

from sqlalchemy import String, Text, BigInteger, Integer, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class DocumentType(str, Enum):
    BOOK = "book"
    SHORT_NOTE = "short_note"
    PAPER = "paper"
    JUMBLED = "jumbled"


class Medium(str, Enum):
    SINHALA = "sinhala"
    ENGLISH = "english"
    TAMIL = "tamil"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Document(RecordBase):
    __tablename__ = "documents"

    title: Mapped[str] = mapped_column(String, nullable=False)
    uploader_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    file_path: Mapped[str] = mapped_column(Text, nullable=False, default="")
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=True)
    page_count: Mapped[int] = mapped_column(Integer, nullable=True)
    thumbnail_url: Mapped[str] = mapped_column(Text, nullable=True)

    # Categorization
    type: Mapped[str] = mapped_column(String, nullable=True)
    subject: Mapped[str] = mapped_column(String, nullable=True, index=True)
    medium: Mapped[str] = mapped_column(String, nullable=True)

    status: Mapped[str] = mapped_column(
        String, nullable=False, default=DocumentStatus.PENDING.value, index=True
    )  # pending, approved, rejected
    rejection_reason: Mapped[str] = mapped_column(Text, nullable=True)

    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downloads: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_trending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
