"""Narrow storage interface the tag store depends on."""

from collections.abc import Iterable, Sequence
from typing import Protocol


class TagStorage(Protocol):
    """
    Минимальный интерфейс хранилища для TagStoreService.

    Все insert_*_if_absent - upsert-or-ignore: повторная или параллельная
    вставка той же строки не ошибка. Чтение ничего не создаёт.

    Реализации:
        HashTagRepository - SQLAlchemy (PostgreSQL / SQLite)
        тестовый in-memory двойник в tests/
    """

    async def insert_hash_if_absent(self, value: bytes) -> int:
        """Ensure a Hash row exists and return its id."""
        ...

    async def insert_tags_if_absent(self, names: Iterable[str]) -> dict[str, int]:
        """Ensure Tag rows exist and return {name: id}."""
        ...

    async def insert_associations_if_absent(self, hash_id: int, tag_ids: Iterable[int]) -> None:
        """Ensure HashTag rows exist for every (hash_id, tag_id)."""
        ...

    async def fetch_tags_for_hash(self, value: bytes) -> set[str]:
        """Tag names associated with one hash; empty set for an unknown hash."""
        ...

    async def fetch_tags_for_hashes(self, values: Sequence[bytes]) -> dict[bytes, set[str]]:
        """Tag names for many hashes in one round-trip; hashes without tags are omitted."""
        ...
