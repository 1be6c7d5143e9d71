"""
Pydantic схемы для API (request/response модели).

Хеши передаются как hex-строки (регистр не важен), теги - как строки.
Декодирование hex и проверка длины хеша выполняются в сервисном слое,
поэтому некорректный хеш даёт 400 INVALID_ARGUMENT, а не 422.
"""

from pydantic import BaseModel, Field

# ============================================================================
# TAG STORE SCHEMAS
# ============================================================================


class TagsResponse(BaseModel):
    """
    Теги одного хеша.

    Пример:
    ```json
    {"tags": ["holiday", "photo"]}
    ```

    Список отсортирован для стабильного вывода, но по смыслу это множество.
    """

    tags: list[str] = Field(default_factory=list, description="Имена тегов")


class AddTagsRequest(BaseModel):
    """
    Запрос на добавление тегов к хешу.

    Пример:
    ```json
    {"tags": ["holiday", "photo"]}
    ```
    """

    tags: list[str] = Field(..., description="Теги для добавления (дубликаты допустимы)")


class GetMultipleTagsRequest(BaseModel):
    """
    Запрос тегов для нескольких хешей.

    Пример:
    ```json
    {"hashes": ["9f86d081", "60303ae2", "9f86d081"]}
    ```
    """

    hashes: list[str] = Field(..., description="Хеши в hex (порядок и дубликаты сохраняются)")


class GetMultipleTagsResponse(BaseModel):
    """Теги для каждого запрошенного хеша, в порядке запроса."""

    tags: list[TagsResponse] = Field(default_factory=list)


class CopyTagsRequest(BaseModel):
    """
    Запрос на копирование тегов.

    Пример:
    ```json
    {"src_hash": "9f86d081", "dest_hash": "60303ae2"}
    ```
    """

    src_hash: str = Field(..., description="Хеш-источник (hex)")
    dest_hash: str = Field(..., description="Хеш-получатель (hex)")


# ============================================================================
# ERROR SCHEMAS
# ============================================================================


class ErrorDetail(BaseModel):
    """
    Детали ошибки для конкретного поля.

    Пример:
    ```json
    {"field": "tags", "message": "Invalid tag '': must be between 1 and 255 characters, is 0"}
    ```
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorBody(BaseModel):
    """
    Тело ошибки.

    retryable=true означает, что запрос можно безопасно повторить
    (все операции идемпотентны).
    """

    code: str = Field(..., description="Код ошибки (INVALID_ARGUMENT, STORAGE_UNAVAILABLE, etc.)")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: list[ErrorDetail] | None = Field(None, description="Детали по полям")
    retryable: bool = Field(False, description="Можно ли повторить запрос")


class ErrorResponse(BaseModel):
    """
    Единый формат ошибки для всех endpoints.

    Пример (503):
    ```json
    {
        "error": {
            "code": "STORAGE_UNAVAILABLE",
            "message": "Storage operation 'fetch tags for hash' failed",
            "details": null,
            "retryable": true
        }
    }
    ```
    """

    error: ErrorBody
