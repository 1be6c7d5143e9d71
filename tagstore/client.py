"""
Асинхронный HTTP клиент для Tag Store.

Пример:
    async with TagStoreClient.from_settings() as client:
        await client.add_tags_to_hash(digest, ["holiday", "photo"])
        tags = await client.get_tags(digest)

Хеши в API клиента - bytes, на проводе - hex.
"""

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.logging import get_logger

logger = get_logger(__name__)

# ~/.config/tagstore/.env - пользовательский конфиг клиента
CLIENT_ENV_FILE = Path.home() / ".config" / "tagstore" / ".env"


class ClientSettings(BaseSettings):
    """
    Настройки клиента.

    Переменные окружения с префиксом TAGSTORE_:
        TAGSTORE_SERVER_URL=http://tags.local:8000
        TAGSTORE_API_KEY=secret
    """

    SERVER_URL: str = "http://localhost:8000"
    API_KEY: str = "dev-api-key-change-in-production"
    TIMEOUT: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="TAGSTORE_",
        env_file=str(CLIENT_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


class TagStoreClientError(Exception):
    """
    Сервер вернул ошибку.

    Attributes:
        status_code: HTTP статус
        code: Код ошибки из ErrorResponse (INVALID_ARGUMENT, STORAGE_UNAVAILABLE, ...)
        retryable: Можно ли безопасно повторить запрос
    """

    def __init__(self, status_code: int, code: str, message: str, retryable: bool = False):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.retryable = retryable
        super().__init__(f"server returned {status_code} {code}: {message}")


class TagStoreClient:
    """Клиент четырёх операций Tag Store."""

    API_PREFIX = "/api/v1"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Адрес сервера, например http://localhost:8000
            api_key: Значение заголовка X-API-Key
            timeout: Таймаут запроса в секундах
            transport: Свой транспорт httpx (в тестах - ASGITransport(app))
        """
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + self.API_PREFIX,
            headers={"X-API-Key": api_key},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None) -> "TagStoreClient":
        """Создать клиент из ClientSettings (окружение / ~/.config/tagstore/.env)."""
        settings = settings or ClientSettings()
        return cls(settings.SERVER_URL, settings.API_KEY, timeout=settings.TIMEOUT)

    async def __aenter__(self) -> "TagStoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_tags(self, hash: bytes) -> list[str]:
        """Теги одного хеша (пустой список для неизвестного)."""
        data = await self._request("GET", f"/hashes/{hash.hex()}/tags")
        return data["tags"]

    async def get_multiple_tags(self, hashes: Iterable[bytes]) -> list[list[str]]:
        """Теги для каждого хеша, в порядке аргумента."""
        payload = {"hashes": [h.hex() for h in hashes]}
        data = await self._request("POST", "/hashes/tags/batch", json=payload)
        return [entry["tags"] for entry in data["tags"]]

    async def add_tags_to_hash(self, hash: bytes, tags: Sequence[str]) -> None:
        await self._request("POST", f"/hashes/{hash.hex()}/tags", json={"tags": list(tags)})

    async def copy_tags(self, src: bytes, dest: bytes) -> None:
        payload = {"src_hash": src.hex(), "dest_hash": dest.hex()}
        await self._request("POST", "/hashes/copy-tags", json=payload)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await self._http.request(method, url, **kwargs)
        if response.is_error:
            raise self._error_from(response)
        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        return response.json()

    @staticmethod
    def _error_from(response: httpx.Response) -> TagStoreClientError:
        """Разобрать ErrorResponse; для не-JSON ответов (401 и т.п.) взять текст."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            error = body["error"]
            return TagStoreClientError(
                response.status_code,
                error.get("code", "UNKNOWN"),
                error.get("message", ""),
                retryable=bool(error.get("retryable", False)),
            )

        message = body.get("detail", "") if isinstance(body, dict) else response.text
        logger.debug("Non-envelope error response", extra={"status": response.status_code})
        return TagStoreClientError(
            response.status_code,
            "HTTP_ERROR",
            str(message),
            retryable=response.status_code >= 500,
        )
