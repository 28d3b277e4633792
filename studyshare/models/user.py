"""
Users. Only the fields search needs for uploader attribution.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class User(RecordBase):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String, nullable=True)
    avatar_url: Mapped[str] = mapped_column(String, nullable=True)
    # Public identity. Real names are never shown next to uploads.
    anon_name: Mapped[str] = mapped_column(String, nullable=True)
    anon_avatar_seed: Mapped[str] = mapped_column(String, nullable=True)
