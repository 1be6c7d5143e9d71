"""SQLAlchemy models for the tag store."""

from .base import Base
from .hash import Hash
from .hash_tag import hash_tags
from .tag import TAG_NAME_LENGTH, Tag

__all__ = [
    "Base",
    "Hash",
    "Tag",
    "TAG_NAME_LENGTH",
    "hash_tags",
]
