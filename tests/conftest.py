"""
Pytest fixtures для тестов.

Предоставляет:
- test_db: изолированная SQLite in-memory БД для каждого теста
- file_engine: SQLite в файле - для тестов параллельных транзакций
- test_client: HTTP клиент для тестирования API endpoints
- fake_storage: in-memory реализация TagStorage для тестов сервиса
"""

from collections.abc import Iterable, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tagstore.api.dependencies import get_db  # ВАЖНО: переопределяем get_db из dependencies
from tagstore.core.config import settings
from tagstore.core.database import create_engine, create_session_factory, drop_db, init_db
from tagstore.main import app

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """
    Создаёт async engine для тестовой БД (SQLite in-memory).

    StaticPool (внутри create_engine) обеспечивает одно и то же соединение,
    что критично для in-memory БД (иначе данные теряются).
    Таблицы пересоздаются для каждого теста.
    """
    engine = create_engine(TEST_DATABASE_URL)

    await drop_db(engine)
    await init_db(engine)

    yield engine

    await drop_db(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine):
    """
    Предоставляет async session для работы с тестовой БД.

    Транзакция откатывается после теста.
    """
    TestSessionLocal = create_session_factory(test_engine)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """
    Engine на SQLite-файле с пулом соединений.

    В отличие от in-memory, каждая сессия получает своё соединение,
    поэтому транзакции действительно идут параллельно.
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'tagstore.db'}")
    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(test_engine):
    """
    HTTP клиент для тестирования API endpoints.

    Использует тестовую БД вместо production БД и передаёт правильный X-API-Key.
    """
    TestSessionLocal = create_session_factory(test_engine)

    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-API-Key": settings.API_KEY},
    ) as client:
        yield client

    app.dependency_overrides.clear()


class FakeTagStorage:
    """
    In-memory TagStorage.

    Повторяет контракт хранилища: insert_*_if_absent идемпотентны,
    чтение ничего не создаёт. Считает обращения к fetch_* для проверки батчинга.
    """

    def __init__(self):
        self.hashes: dict[bytes, int] = {}
        self.tags: dict[str, int] = {}
        self.links: set[tuple[int, int]] = set()
        self.fetch_calls = 0

    async def insert_hash_if_absent(self, value: bytes) -> int:
        return self.hashes.setdefault(value, len(self.hashes) + 1)

    async def insert_tags_if_absent(self, names: Iterable[str]) -> dict[str, int]:
        return {name: self.tags.setdefault(name, len(self.tags) + 1) for name in names}

    async def insert_associations_if_absent(self, hash_id: int, tag_ids: Iterable[int]) -> None:
        self.links.update((hash_id, tag_id) for tag_id in tag_ids)

    async def fetch_tags_for_hash(self, value: bytes) -> set[str]:
        self.fetch_calls += 1
        return self._tags_of(value)

    async def fetch_tags_for_hashes(self, values: Sequence[bytes]) -> dict[bytes, set[str]]:
        self.fetch_calls += 1
        result = {value: self._tags_of(value) for value in values}
        return {value: tags for value, tags in result.items() if tags}

    def _tags_of(self, value: bytes) -> set[str]:
        hash_id = self.hashes.get(value)
        names = {tag_id: name for name, tag_id in self.tags.items()}
        return {names[tag_id] for h, tag_id in self.links if h == hash_id}


@pytest.fixture
def fake_storage():
    """Пустое in-memory хранилище."""
    return FakeTagStorage()


# Pytest configuration
@pytest.fixture(scope="session")
def anyio_backend():
    """Используем asyncio для всех async тестов."""
    return "asyncio"
