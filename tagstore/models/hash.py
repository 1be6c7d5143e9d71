"""Hash model."""

from sqlalchemy import LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Hash(Base):
    """
    Content hash (opaque bytes).

    Строка создаётся лениво при первом изменяющем вызове
    (AddTagsToHash или CopyTags в качестве dest) и больше не меняется.
    """

    __tablename__ = "hashes"

    id: Mapped[int] = mapped_column(primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Hash(id={self.id}, value='{self.value.hex()}')>"
