"""Tag model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# Верхняя граница длины имени тега в БД (валидация - settings.TAG_MAX_LENGTH)
TAG_NAME_LENGTH = 255


class Tag(Base):
    """Human-readable label. The name is unique and never changes once created."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(TAG_NAME_LENGTH), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
