"""
Тесты для Repository Layer.

Проверяем:
- insert-or-ignore: повторная вставка не создаёт дубликатов и не падает
- выборку тегов для одного и многих хешей
- то, что чтение ничего не создаёт
- превращение ошибок БД в StorageError
"""

import pytest
from sqlalchemy.exc import OperationalError

from tagstore.core.exceptions import StorageError
from tagstore.models import Hash, Tag
from tagstore.repositories import HashRepository, HashTagRepository, TagRepository
from tagstore.repositories import base as base_repository
from tagstore.repositories import tag as tag_repository

H1 = bytes.fromhex("aa" * 32)
H2 = bytes.fromhex("bb" * 32)


# ============================================================================
# HASH REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_insert_hash_if_absent_creates_row(test_db):
    """Test: первый вызов создаёт хеш."""
    repo = HashRepository(test_db)

    hash_id = await repo.insert_hash_if_absent(H1)

    found = await repo.get_by_id(hash_id)
    assert found is not None
    assert found.value == H1


@pytest.mark.asyncio
async def test_insert_hash_if_absent_is_idempotent(test_db):
    """Test: повторный вызов возвращает тот же ID и не создаёт дубликат."""
    repo = HashRepository(test_db)

    first = await repo.insert_hash_if_absent(H1)
    second = await repo.insert_hash_if_absent(H1)

    assert first == second
    assert await repo.count() == 1


@pytest.mark.asyncio
async def test_insert_hash_if_absent_after_commit(test_db):
    """Test: строка, закоммиченная ранее (например, другим запросом), не вызывает ошибку."""
    test_db.add(Hash(value=H1))
    await test_db.commit()

    repo = HashRepository(test_db)
    hash_id = await repo.insert_hash_if_absent(H1)

    existing = await repo.get_by_value(H1)
    assert existing.id == hash_id


@pytest.mark.asyncio
async def test_get_by_value_unknown(test_db):
    """Test: неизвестный хеш - None."""
    repo = HashRepository(test_db)

    assert await repo.get_by_value(H2) is None


# ============================================================================
# TAG REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_insert_tags_if_absent(test_db):
    """Test: массовое создание тегов с дубликатами во входе."""
    repo = TagRepository(test_db)

    ids = await repo.insert_tags_if_absent(["photo", "holiday", "photo"])

    assert set(ids) == {"photo", "holiday"}
    assert len(set(ids.values())) == 2
    assert await repo.count() == 2


@pytest.mark.asyncio
async def test_insert_tags_if_absent_mixes_existing_and_new(test_db):
    """Test: существующие теги сохраняют свой ID, новые создаются."""
    test_db.add(Tag(name="photo"))
    await test_db.flush()
    existing = await TagRepository(test_db).get_by_name("photo")

    repo = TagRepository(test_db)
    ids = await repo.insert_tags_if_absent(["photo", "beach"])

    assert ids["photo"] == existing.id
    assert "beach" in ids
    assert await repo.count() == 2


@pytest.mark.asyncio
async def test_insert_tags_if_absent_empty(test_db):
    """Test: пустой вход - пустой результат, запросов нет."""
    repo = TagRepository(test_db)

    assert await repo.insert_tags_if_absent([]) == {}


@pytest.mark.asyncio
async def test_tag_names_are_case_sensitive(test_db):
    """Test: семантику тегов не интерпретируем - "Photo" и "photo" разные теги."""
    repo = TagRepository(test_db)

    ids = await repo.insert_tags_if_absent(["Photo", "photo"])

    assert ids["Photo"] != ids["photo"]


# ============================================================================
# HASH-TAG REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_associations_are_not_duplicated(test_db):
    """Test: повторная привязка того же тега - no-op."""
    repo = HashTagRepository(test_db)
    hash_id = await repo.insert_hash_if_absent(H1)
    tag_ids = await repo.insert_tags_if_absent(["x"])

    await repo.insert_associations_if_absent(hash_id, tag_ids.values())
    await repo.insert_associations_if_absent(hash_id, tag_ids.values())
    await repo.insert_associations_if_absent(hash_id, [tag_ids["x"], tag_ids["x"]])

    assert await repo.count_associations() == 1


@pytest.mark.asyncio
async def test_fetch_tags_for_hash(test_db):
    """Test: теги одного хеша."""
    repo = HashTagRepository(test_db)
    hash_id = await repo.insert_hash_if_absent(H1)
    tag_ids = await repo.insert_tags_if_absent(["a", "b"])
    await repo.insert_associations_if_absent(hash_id, tag_ids.values())

    assert await repo.fetch_tags_for_hash(H1) == {"a", "b"}


@pytest.mark.asyncio
async def test_fetch_tags_for_unknown_hash_does_not_create_it(test_db):
    """Test: чтение неизвестного хеша - пустое множество, строка не создаётся."""
    repo = HashTagRepository(test_db)

    assert await repo.fetch_tags_for_hash(H2) == set()
    assert await repo.hash_repo.count() == 0


@pytest.mark.asyncio
async def test_fetch_tags_for_hashes(test_db):
    """Test: теги многих хешей одним запросом; хеши без тегов не попадают в результат."""
    repo = HashTagRepository(test_db)
    h1_id = await repo.insert_hash_if_absent(H1)
    await repo.insert_hash_if_absent(H2)  # хеш без тегов
    tag_ids = await repo.insert_tags_if_absent(["a", "b"])
    await repo.insert_associations_if_absent(h1_id, tag_ids.values())

    result = await repo.fetch_tags_for_hashes([H1, H2, H1, bytes.fromhex("cc")])

    assert result == {H1: {"a", "b"}}


@pytest.mark.asyncio
async def test_fetch_tags_for_hashes_empty(test_db):
    """Test: пустой список хешей."""
    repo = HashTagRepository(test_db)

    assert await repo.fetch_tags_for_hashes([]) == {}


@pytest.mark.asyncio
async def test_database_errors_become_storage_error(test_db, monkeypatch):
    """Test: OperationalError драйвера превращается в StorageError (retryable)."""
    repo = HashTagRepository(test_db)

    async def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(test_db, "execute", broken_execute)

    with pytest.raises(StorageError) as exc_info:
        await repo.fetch_tags_for_hash(H1)

    assert exc_info.value.retryable is True
    assert isinstance(exc_info.value.__cause__, OperationalError)


# ============================================================================
# INSERT-OR-IGNORE: SAVEPOINT FALLBACK AND CHUNKING
# ============================================================================


@pytest.mark.asyncio
async def test_insert_ignore_savepoint_fallback(test_db, monkeypatch):
    """
    Test: диалект без ON CONFLICT - SAVEPOINT на строку.

    Повторные вставки хеша, тегов и связей дают по одной строке,
    а транзакция остаётся рабочей после пойманного IntegrityError.
    """
    monkeypatch.setattr(base_repository, "_CONFLICT_INSERTS", {})
    repo = HashTagRepository(test_db)

    first_hash_id = await repo.insert_hash_if_absent(H1)
    second_hash_id = await repo.insert_hash_if_absent(H1)
    first_tags = await repo.insert_tags_if_absent(["a", "b"])
    second_tags = await repo.insert_tags_if_absent(["b", "a", "c"])
    await repo.insert_associations_if_absent(first_hash_id, first_tags.values())
    await repo.insert_associations_if_absent(first_hash_id, second_tags.values())

    assert first_hash_id == second_hash_id
    assert first_tags["a"] == second_tags["a"]
    assert await repo.hash_repo.count() == 1
    assert await repo.tag_repo.count() == 3
    assert await repo.count_associations() == 3
    assert await repo.fetch_tags_for_hash(H1) == {"a", "b", "c"}


@pytest.mark.asyncio
async def test_insert_ignore_splits_large_inserts(test_db, monkeypatch):
    """Test: вставка больше MAX_BIND_PARAMS параметров уходит несколькими запросами."""
    monkeypatch.setattr(base_repository, "MAX_BIND_PARAMS", 4)
    monkeypatch.setattr(tag_repository, "MAX_BIND_PARAMS", 4)
    repo = HashTagRepository(test_db)

    executed = []
    original_execute = test_db.execute

    async def counting_execute(statement, *args, **kwargs):
        executed.append(statement)
        return await original_execute(statement, *args, **kwargs)

    monkeypatch.setattr(test_db, "execute", counting_execute)

    names = [f"tag-{i}" for i in range(10)]
    hash_id = await repo.insert_hash_if_absent(H1)
    executed.clear()

    tag_ids = await repo.insert_tags_if_absent(names)
    # 10 имён: INSERT по 4 строки (3 запроса) + SELECT по 4 имени (3 запроса)
    assert len(executed) == 6

    executed.clear()
    await repo.insert_associations_if_absent(hash_id, tag_ids.values())
    # 2 параметра на строку: по 2 строки на INSERT
    assert len(executed) == 5

    assert set(tag_ids) == set(names)
    assert await repo.count_associations() == 10
    assert await repo.fetch_tags_for_hash(H1) == set(names)
