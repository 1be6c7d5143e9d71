"""Hash-Tag association repository (SQLAlchemy implementation of TagStorage)."""

from collections.abc import Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Hash, Tag, hash_tags
from .base import storage_errors
from .hash import HashRepository
from .tag import TagRepository


class HashTagRepository:
    """
    Репозиторий связей хеш <-> тег.

    Объединяет HashRepository и TagRepository и реализует интерфейс TagStorage.
    Все методы работают в рамках переданной сессии: транзакцией
    (commit / rollback) управляет вызывающая сторона.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.hash_repo = HashRepository(db)
        self.tag_repo = TagRepository(db)

    async def insert_hash_if_absent(self, value: bytes) -> int:
        return await self.hash_repo.insert_hash_if_absent(value)

    async def insert_tags_if_absent(self, names: Iterable[str]) -> dict[str, int]:
        return await self.tag_repo.insert_tags_if_absent(names)

    async def insert_associations_if_absent(self, hash_id: int, tag_ids: Iterable[int]) -> None:
        """
        Привязать теги к хешу, пропуская уже существующие связи.

        SQL эквивалент:
            INSERT INTO hash_tags (hash_id, tag_id)
            VALUES ({hash_id}, 1), ({hash_id}, 2)
            ON CONFLICT DO NOTHING;
        """
        rows = [{"hash_id": hash_id, "tag_id": tag_id} for tag_id in sorted(set(tag_ids))]
        await self.hash_repo.insert_ignore(rows, table=hash_tags)

    async def fetch_tags_for_hash(self, value: bytes) -> set[str]:
        """
        Получить имена тегов хеша.

        SQL эквивалент:
            SELECT tags.name
            FROM tags
            JOIN hash_tags ON tags.id = hash_tags.tag_id
            JOIN hashes ON hashes.id = hash_tags.hash_id
            WHERE hashes.value = {value};

        Неизвестный хеш даёт пустое множество, а не ошибку.
        """
        stmt = (
            select(Tag.name)
            .join(hash_tags, Tag.id == hash_tags.c.tag_id)
            .join(Hash, Hash.id == hash_tags.c.hash_id)
            .where(Hash.value == value)
        )
        async with storage_errors("fetch tags for hash"):
            result = await self.db.execute(stmt)
        return set(result.scalars().all())

    async def fetch_tags_for_hashes(self, values: Sequence[bytes]) -> dict[bytes, set[str]]:
        """
        Получить теги для множества хешей одним запросом.

        Args:
            values: Хеши (дубликаты допустимы)

        Returns:
            Словарь {хеш: множество тегов}; хеши без тегов в словарь не попадают

        SQL эквивалент:
            SELECT hashes.value, tags.name
            FROM hashes
            JOIN hash_tags ON hashes.id = hash_tags.hash_id
            JOIN tags ON tags.id = hash_tags.tag_id
            WHERE hashes.value IN (...);
        """
        unique_values = list(dict.fromkeys(values))
        if not unique_values:
            return {}

        stmt = (
            select(Hash.value, Tag.name)
            .join(hash_tags, Hash.id == hash_tags.c.hash_id)
            .join(Tag, Tag.id == hash_tags.c.tag_id)
            .where(Hash.value.in_(unique_values))
        )
        async with storage_errors("fetch tags for hashes"):
            result = await self.db.execute(stmt)

        tags_by_hash: dict[bytes, set[str]] = {}
        for value, name in result.all():
            tags_by_hash.setdefault(bytes(value), set()).add(name)
        return tags_by_hash

    async def count_associations(self) -> int:
        """
        Количество связей хеш-тег.

        SQL эквивалент:
            SELECT COUNT(*) FROM hash_tags;
        """
        async with storage_errors("count hash_tags"):
            result = await self.db.execute(select(func.count()).select_from(hash_tags))
        return result.scalar_one()
