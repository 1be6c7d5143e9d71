"""Tag store service: the tag-association engine."""

from collections.abc import Iterable, Sequence

from ..core.config import settings
from ..core.logging import get_logger
from ..repositories import TagStorage
from .validation import validate_batch_size, validate_hash, validate_tags

logger = get_logger(__name__)


class TagStoreService:
    """
    Сервис привязки тегов к хешам контента.

    Четыре операции:
    - get_tags / get_multiple_tags - чистое чтение, ничего не создают
    - add_tags_to_hash / copy_tags - объединение множеств (union),
      строки Hash / Tag / HashTag создаются лениво

    Атомарность: сервис не делает commit. Одна операция = одна транзакция
    сессии, которой управляет вызывающая сторона (get_db в API).
    Ошибка на любом шаге откатывает всю операцию.

    Конкурентность: блокировок в процессе нет. Уникальные ограничения БД
    плюс insert-or-ignore в хранилище делают параллельные вызовы безопасными.
    """

    def __init__(self, storage: TagStorage):
        """
        Инициализация сервиса.

        Args:
            storage: Реализация TagStorage (HashTagRepository или тестовый двойник)
        """
        self.storage = storage

    async def get_tags(self, hash: bytes) -> set[str]:
        """
        Получить теги хеша.

        Args:
            hash: Байты хеша

        Returns:
            Множество имён тегов (порядок не гарантирован).
            Для неизвестного хеша - пустое множество.

        Raises:
            InvalidHashError: Некорректный хеш
            StorageError: Ошибка хранилища (можно повторить)
        """
        hash = validate_hash(hash)
        return await self.storage.fetch_tags_for_hash(hash)

    async def get_multiple_tags(self, hashes: Sequence[bytes]) -> list[set[str]]:
        """
        Получить теги для списка хешей одним запросом к БД.

        Args:
            hashes: Хеши (порядок важен, дубликаты допустимы)

        Returns:
            Список множеств тегов, позиция i соответствует hashes[i]

        Raises:
            InvalidArgumentError: Хешей больше settings.MAX_BATCH_HASHES
            InvalidHashError: Некорректный хеш (field = "hashes[i]")

        Пример:
            h1 -> {"a"}, h2 -> {"b"}
            get_multiple_tags([h1, h2, h1]) -> [{"a"}, {"b"}, {"a"}]
        """
        validate_batch_size(hashes, settings.MAX_BATCH_HASHES, "hashes", "hashes")
        hashes = [validate_hash(h, field=f"hashes[{i}]") for i, h in enumerate(hashes)]
        if not hashes:
            return []

        tags_by_hash = await self.storage.fetch_tags_for_hashes(hashes)

        # Каждая позиция получает своё множество, даже для повторяющихся хешей
        return [set(tags_by_hash.get(h, ())) for h in hashes]

    async def add_tags_to_hash(self, hash: bytes, tags: Iterable[str]) -> None:
        """
        Добавить теги к хешу.

        Args:
            hash: Байты хеша (создаётся, если его ещё нет)
            tags: Имена тегов (дубликаты и уже привязанные теги - не ошибка)

        После вызова: tags(hash) == tags_before(hash) ∪ set(tags).
        Пустой список тегов только гарантирует существование строки хеша.

        Raises:
            InvalidHashError / InvalidTagError: до любых изменений
            StorageError: Ошибка хранилища (можно повторить)
        """
        hash = validate_hash(hash)
        names = validate_tags(tags)

        await self._union_into(hash, names)

        logger.info(
            "Tags added to hash",
            extra={"hash": hash.hex(), "tag_count": len(names)},
        )

    async def copy_tags(self, src: bytes, dest: bytes) -> None:
        """
        Скопировать теги src в dest (объединение, не замена).

        Args:
            src: Хеш-источник (неизвестный = пустое множество, не создаётся)
            dest: Хеш-получатель (создаётся, если его ещё нет)

        После вызова: tags(dest) == tags_before(dest) ∪ tags(src); src не меняется.
        copy_tags(h, h) - успешный no-op.

        Чтение src и запись dest идут в одной транзакции. Если src параллельно
        меняется другим запросом, копия отражает множество тегов src на какой-то
        момент между началом и концом вызова.
        """
        src = validate_hash(src, field="src_hash")
        dest = validate_hash(dest, field="dest_hash")

        if src == dest:
            logger.debug("Copy onto itself skipped", extra={"hash": src.hex()})
            return

        src_tags = await self.storage.fetch_tags_for_hash(src)
        await self._union_into(dest, sorted(src_tags))

        logger.info(
            "Tags copied",
            extra={"src_hash": src.hex(), "dest_hash": dest.hex(), "tag_count": len(src_tags)},
        )

    # Вспомогательные методы (private)

    async def _union_into(self, hash: bytes, names: list[str]) -> None:
        """Ensure the hash row, the tag rows and their associations exist."""
        hash_id = await self.storage.insert_hash_if_absent(hash)
        if not names:
            return

        tag_ids = await self.storage.insert_tags_if_absent(names)
        await self.storage.insert_associations_if_absent(hash_id, tag_ids.values())
