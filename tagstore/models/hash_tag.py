"""Hash-Tag junction table."""

from sqlalchemy import Column, ForeignKey, Integer, Table

from .base import Base

# Many-to-many junction table for hashes and tags.
# Составной первичный ключ гарантирует не более одной связи на пару (hash_id, tag_id).
hash_tags = Table(
    "hash_tags",
    Base.metadata,
    Column("hash_id", Integer, ForeignKey("hashes.id"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id"), primary_key=True),
)
