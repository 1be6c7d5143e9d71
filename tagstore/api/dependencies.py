"""
Dependencies для FastAPI endpoints.

Цепочка зависимостей:
    get_tag_store_service -> get_db -> AsyncSessionLocal()

Одна сессия = одна транзакция = один логический вызов TagStore.
FastAPI кеширует зависимости в рамках запроса, поэтому endpoint,
запросивший и сервис, и get_db, получает одну и ту же сессию.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import AsyncSessionLocal
from ..repositories import HashTagRepository, storage_errors
from ..services import TagStoreService

# ============================================================================
# API KEY AUTHENTICATION
# ============================================================================

api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,  # Не выбрасывать ошибку автоматически, мы сами обработаем
    description="API ключ для авторизации. Передавайте в заголовке X-API-Key",
)


async def verify_api_key(api_key: str = Depends(api_key_header)) -> str:
    """
    Dependency для проверки API ключа.

    Пример запроса:
        curl -H "X-API-Key: your-secret-key" http://localhost:8000/api/v1/hashes/9f86d081/tags
    """
    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is missing. Add header: X-API-Key: your-key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if api_key != settings.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


# ============================================================================
# DATABASE SESSION DEPENDENCY
# ============================================================================


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency для получения сессии БД.

    Автоматически:
    1. Создаёт сессию
    2. Передаёт в endpoint
    3. Делает commit() при успехе (если endpoint не сделал его сам)
    4. Делает rollback() при ошибке
    5. Закрывает сессию
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            async with storage_errors("commit"):
                await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def commit(db: AsyncSession) -> None:
    """
    Зафиксировать транзакцию до отправки ответа.

    Изменяющие endpoints вызывают commit явно: если он упадёт,
    клиент получит 503, а не 204 для несохранённых данных.
    """
    async with storage_errors("commit"):
        await db.commit()


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


async def get_tag_store_service(db: AsyncSession = Depends(get_db)) -> TagStoreService:
    """
    Dependency для TagStoreService.

    Хранилище передаётся в сервис явно - глобального состояния в ядре нет.
    """
    return TagStoreService(HashTagRepository(db))
