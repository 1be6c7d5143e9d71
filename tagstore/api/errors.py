"""
Обработчики ошибок (Exception Handlers) для API.

Единый формат ErrorResponse для всех ошибок:
- InvalidArgumentError -> 400 INVALID_ARGUMENT (повтор не поможет)
- StorageError         -> 503 STORAGE_UNAVAILABLE (можно повторить)
- ошибки Pydantic      -> 422 VALIDATION_ERROR
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.exceptions import InvalidArgumentError, StorageError
from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

# Через сколько секунд клиенту стоит повторить запрос после 503
RETRY_AFTER_SECONDS = 1


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: list[ErrorDetail] | None = None,
    retryable: bool = False,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error_response = ErrorResponse(
        error=ErrorBody(code=code, message=message, details=details, retryable=retryable)
    )
    return JSONResponse(
        status_code=status_code, content=error_response.model_dump(), headers=headers
    )


async def invalid_argument_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    """Некорректный хеш или тег (400)."""
    logger.warning(f"Invalid argument: {exc.field} - {exc.message}")

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        code="INVALID_ARGUMENT",
        message=exc.message,
        details=[ErrorDetail(field=exc.field, message=exc.message)],
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """
    Ошибка хранилища (503).

    Детали ошибки БД клиенту не показываем - они уже в логах.
    """
    logger.error(f"Storage error: {exc}")

    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        code="STORAGE_UNAVAILABLE",
        message=str(exc),
        retryable=True,
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Обработчик для ошибок валидации Pydantic (422).

    Преобразуем формат Pydantic:
        {"detail": [{"loc": ["body", "tags"], "msg": "..."}]}
    в наш:
        {"error": {"code": "VALIDATION_ERROR", "details": [{"field": "tags", ...}]}}
    """
    logger.warning(f"Validation Error: {exc.errors()}")

    details = []
    for error in exc.errors():
        # loc - путь к полю, например ["body", "tags", 0] или ["path", "hash_hex"]
        field_path = error.get("loc", [])
        field_name = field_path[-1] if field_path else "unknown"

        if len(field_path) > 1 and field_path[0] == "body":
            field_name = ".".join(str(p) for p in field_path[1:])

        details.append(
            ErrorDetail(field=str(field_name), message=error.get("msg", "Validation error"))
        )

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="VALIDATION_ERROR",
        message="Request validation failed",
        details=details,
    )


def register_error_handlers(app):
    """
    Регистрирует все error handlers в приложении FastAPI.

    Вызывается из main.py:
        from tagstore.api.errors import register_error_handlers
        register_error_handlers(app)
    """
    app.add_exception_handler(InvalidArgumentError, invalid_argument_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    logger.info("Error handlers registered")
