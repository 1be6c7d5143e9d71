"""Base repository with common read and insert-or-ignore operations."""

import logging
from collections.abc import AsyncIterator, Iterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import Table, func, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import StorageError
from ..models.base import Base

logger = logging.getLogger(__name__)

# TypeVar для Generic класса - позволяет работать с любой моделью
ModelType = TypeVar("ModelType", bound=Base)

# Диалекты с нативным INSERT ... ON CONFLICT DO NOTHING
_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Параметров на один запрос: asyncpg допускает не больше 32767
MAX_BIND_PARAMS = 30_000


def chunked(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    """Разбить последовательность на куски не длиннее size."""
    for start in range(0, len(items), size):
        yield items[start : start + size]


@asynccontextmanager
async def storage_errors(operation: str) -> AsyncIterator[None]:
    """
    Превращает ошибки драйвера БД в StorageError.

    Использование:
        async with storage_errors("fetch tags"):
            result = await self.db.execute(...)

    DBAPIError покрывает OperationalError (нет соединения, deadlock,
    serialization failure), OSError - ошибки сокета при подключении.
    """
    try:
        yield
    except (DBAPIError, OSError) as e:
        logger.warning(
            "Storage operation failed",
            extra={"operation": operation, "error": str(e)},
            exc_info=True,
        )
        raise StorageError(f"Storage operation '{operation}' failed") from e


class BaseRepository(Generic[ModelType]):
    """
    Базовый репозиторий.

    Хранилище тегов только растёт: строки не обновляются и не удаляются,
    поэтому здесь нет update/delete. Создание строк идёт через
    insert-or-ignore, а не через "проверить, потом вставить" (это гонка).

    Пример использования:
        repo = BaseRepository[Tag](Tag, db_session)
        tag = await repo.get_by_id(1)
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """
        Инициализация репозитория.

        Args:
            model: Класс модели SQLAlchemy (например, Hash, Tag)
            db: Асинхронная сессия базы данных
        """
        self.model = model
        self.db = db

    async def get_by_id(self, id: int) -> ModelType | None:
        """
        Получить объект по ID.

        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} LIMIT 1;
        """
        async with storage_errors(f"get {self.model.__tablename__} by id"):
            result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def count(self) -> int:
        """
        Подсчитать количество записей.

        SQL эквивалент:
            SELECT COUNT(*) FROM table;
        """
        async with storage_errors(f"count {self.model.__tablename__}"):
            result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    async def insert_ignore(self, rows: list[dict[str, Any]], table: Table | None = None) -> None:
        """
        Вставить строки, молча пропуская те, что нарушают уникальность.

        Args:
            rows: Значения колонок для каждой строки
            table: Таблица (по умолчанию - таблица модели репозитория)

        SQL эквивалент (PostgreSQL, SQLite):
            INSERT INTO table (...) VALUES (...), (...) ON CONFLICT DO NOTHING;

        Если параллельная транзакция вставила ту же строку, PostgreSQL дождётся
        её завершения и пропустит конфликт - для нас это "уже существует", не ошибка.

        Большие списки уходят несколькими INSERT по MAX_BIND_PARAMS параметров,
        все в текущей транзакции.
        """
        if not rows:
            return

        target = table if table is not None else self.model.__table__
        dialect = self.db.get_bind().dialect.name
        conflict_insert = _CONFLICT_INSERTS.get(dialect)

        async with storage_errors(f"insert into {target.name}"):
            if conflict_insert is not None:
                rows_per_statement = max(MAX_BIND_PARAMS // len(rows[0]), 1)
                for chunk in chunked(rows, rows_per_statement):
                    stmt = conflict_insert(target).values(list(chunk)).on_conflict_do_nothing()
                    await self.db.execute(stmt)
                return

            # Другие диалекты: SAVEPOINT на каждую строку, IntegrityError = строка уже есть
            for row in rows:
                try:
                    async with self.db.begin_nested():
                        await self.db.execute(insert(target).values(**row))
                except IntegrityError:
                    logger.debug("Row already exists", extra={"table": target.name})
