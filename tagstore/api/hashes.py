"""
API endpoints для привязки тегов к хешам контента.

RPC -> HTTP:
    GetTags          GET  /hashes/{hash_hex}/tags
    GetMultipleTags  POST /hashes/tags/batch
    AddTagsToHash    POST /hashes/{hash_hex}/tags
    CopyTags         POST /hashes/copy-tags

Хеши - hex-строки. Удаление и переименование тегов не поддерживаются:
множество тегов хеша только растёт.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..services import TagStoreService, parse_hash_hex
from .dependencies import commit, get_db, get_tag_store_service
from .schemas import (
    AddTagsRequest,
    CopyTagsRequest,
    ErrorResponse,
    GetMultipleTagsRequest,
    GetMultipleTagsResponse,
    TagsResponse,
)

router = APIRouter(prefix="/hashes", tags=["hashes"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Некорректный хеш или тег"},
    503: {"model": ErrorResponse, "description": "Хранилище недоступно, запрос можно повторить"},
}


# ============================================================================
# GET MULTIPLE TAGS
# ============================================================================


@router.post(
    "/tags/batch",
    response_model=GetMultipleTagsResponse,
    summary="Получить теги для нескольких хешей",
    responses=ERROR_RESPONSES,
)
async def get_multiple_tags(
    data: GetMultipleTagsRequest, service: TagStoreService = Depends(get_tag_store_service)
) -> GetMultipleTagsResponse:
    """
    Получить теги для списка хешей одним запросом к БД.

    Ответ выровнен по позициям запроса, дубликаты разрешаются независимо.

    Пример запроса:
    ```json
    {"hashes": ["aa", "bb", "aa"]}
    ```

    Пример ответа:
    ```json
    {"tags": [{"tags": ["a"]}, {"tags": ["b"]}, {"tags": ["a"]}]}
    ```
    """
    hashes = [parse_hash_hex(h, field=f"hashes[{i}]") for i, h in enumerate(data.hashes)]
    tag_sets = await service.get_multiple_tags(hashes)
    return GetMultipleTagsResponse(tags=[TagsResponse(tags=sorted(tags)) for tags in tag_sets])


# ============================================================================
# COPY TAGS
# ============================================================================


@router.post(
    "/copy-tags",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Скопировать теги одного хеша в другой",
    responses=ERROR_RESPONSES,
)
async def copy_tags(
    data: CopyTagsRequest,
    service: TagStoreService = Depends(get_tag_store_service),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Скопировать теги src_hash в dest_hash.

    Это объединение: теги, уже привязанные к dest_hash, сохраняются.
    src_hash == dest_hash - успешный no-op.

    Пример запроса:
    ```json
    {"src_hash": "aa", "dest_hash": "bb"}
    ```
    """
    src = parse_hash_hex(data.src_hash, field="src_hash")
    dest = parse_hash_hex(data.dest_hash, field="dest_hash")

    await service.copy_tags(src, dest)
    await commit(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# GET TAGS
# ============================================================================


@router.get(
    "/{hash_hex}/tags",
    response_model=TagsResponse,
    summary="Получить теги хеша",
    responses=ERROR_RESPONSES,
)
async def get_tags(
    hash_hex: str, service: TagStoreService = Depends(get_tag_store_service)
) -> TagsResponse:
    """
    Получить теги хеша.

    Неизвестный хеш - не ошибка: вернётся пустой список.

    Пример запроса:
    ```
    GET /hashes/9f86d081/tags
    ```
    """
    tags = await service.get_tags(parse_hash_hex(hash_hex))
    return TagsResponse(tags=sorted(tags))


# ============================================================================
# ADD TAGS TO HASH
# ============================================================================


@router.post(
    "/{hash_hex}/tags",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Добавить теги к хешу",
    responses=ERROR_RESPONSES,
)
async def add_tags_to_hash(
    hash_hex: str,
    data: AddTagsRequest,
    service: TagStoreService = Depends(get_tag_store_service),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Добавить теги к хешу.

    Хеш и теги создаются автоматически. Повторный вызов с теми же
    данными ничего не меняет (идемпотентность).

    Пример запроса:
    ```json
    {"tags": ["holiday", "photo"]}
    ```
    """
    await service.add_tags_to_hash(parse_hash_hex(hash_hex), data.tags)
    await commit(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
