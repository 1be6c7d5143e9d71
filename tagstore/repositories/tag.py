"""Tag repository with specific queries."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag
from .base import MAX_BIND_PARAMS, BaseRepository, chunked, storage_errors


class TagRepository(BaseRepository[Tag]):
    """
    Репозиторий для работы с тегами.

    Тег создаётся при первом использовании имени и больше не меняется.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Tag, db)

    async def get_by_name(self, name: str) -> Tag | None:
        """
        Получить тег по имени.

        SQL эквивалент:
            SELECT * FROM tags WHERE name = {name};
        """
        async with storage_errors("get tag by name"):
            result = await self.db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def insert_tags_if_absent(self, names: Iterable[str]) -> dict[str, int]:
        """
        Массово создать недостающие теги и вернуть ID всех запрошенных.

        Args:
            names: Имена тегов (дубликаты допустимы)

        Returns:
            Словарь {имя: id} для каждого различного имени

        Два запроса вместо 2N (длинные списки - по куску за запрос):
            INSERT INTO tags (name) VALUES ('a'), ('b') ON CONFLICT DO NOTHING;
            SELECT id, name FROM tags WHERE name IN ('a', 'b');

        Имена вставляются в отсортированном порядке: параллельные транзакции
        берут блокировки уникального индекса в одной и той же последовательности.
        """
        unique_names = sorted(set(names))
        if not unique_names:
            return {}

        await self.insert_ignore([{"name": name} for name in unique_names])

        tag_ids: dict[str, int] = {}
        async with storage_errors("select tag ids"):
            for chunk in chunked(unique_names, MAX_BIND_PARAMS):
                result = await self.db.execute(
                    select(Tag.name, Tag.id).where(Tag.name.in_(chunk))
                )
                tag_ids.update(result.all())
        return tag_ids
