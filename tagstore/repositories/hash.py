"""Hash repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Hash
from .base import BaseRepository, storage_errors


class HashRepository(BaseRepository[Hash]):
    """Репозиторий для хешей контента."""

    def __init__(self, db: AsyncSession):
        super().__init__(Hash, db)

    async def get_by_value(self, value: bytes) -> Hash | None:
        """
        Получить хеш по байтовому значению (точное совпадение).

        SQL эквивалент:
            SELECT * FROM hashes WHERE value = {value};
        """
        async with storage_errors("get hash by value"):
            result = await self.db.execute(select(Hash).where(Hash.value == value))
        return result.scalar_one_or_none()

    async def insert_hash_if_absent(self, value: bytes) -> int:
        """
        Создать хеш, если его ещё нет, и вернуть его ID.

        SQL эквивалент:
            INSERT INTO hashes (value) VALUES ({value}) ON CONFLICT DO NOTHING;
            SELECT id FROM hashes WHERE value = {value};

        Второй запрос видит строку в любом случае: либо её только что
        вставили мы, либо она закоммичена конкурирующей транзакцией.
        """
        await self.insert_ignore([{"value": value}])

        async with storage_errors("select hash id"):
            result = await self.db.execute(select(Hash.id).where(Hash.value == value))
        return result.scalar_one()
