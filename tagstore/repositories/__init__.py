"""Repository layer for data access."""

from .base import BaseRepository, storage_errors
from .hash import HashRepository
from .hash_tag import HashTagRepository
from .storage import TagStorage
from .tag import TagRepository

__all__ = [
    "BaseRepository",
    "HashRepository",
    "TagRepository",
    "HashTagRepository",
    "TagStorage",
    "storage_errors",
]
