"""Service layer with business logic."""

from .tag_store import TagStoreService
from .validation import parse_hash_hex, validate_batch_size, validate_hash, validate_tags

__all__ = [
    "TagStoreService",
    "parse_hash_hex",
    "validate_batch_size",
    "validate_hash",
    "validate_tags",
]
