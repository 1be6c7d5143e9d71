"""Input validation shared by the service, the API schemas and the CLI."""

import re
from collections.abc import Iterable, Sized

from ..core.config import settings
from ..core.exceptions import InvalidArgumentError, InvalidHashError, InvalidTagError

# Только hex-цифры: bytes.fromhex() молча пропускает пробелы
HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")


def validate_hash(
    value: bytes,
    field: str = "hash",
    min_bytes: int | None = None,
    max_bytes: int | None = None,
) -> bytes:
    """
    Проверить длину хеша.

    Args:
        value: Байты хеша
        field: Имя параметра для сообщения об ошибке
        min_bytes: Минимальная длина (по умолчанию settings.HASH_MIN_BYTES)
        max_bytes: Максимальная длина (по умолчанию settings.HASH_MAX_BYTES)

    Returns:
        Тот же хеш в виде bytes

    Raises:
        InvalidHashError: Хеш не bytes, пустой или не укладывается в границы
    """
    min_bytes = settings.HASH_MIN_BYTES if min_bytes is None else min_bytes
    max_bytes = settings.HASH_MAX_BYTES if max_bytes is None else max_bytes
    # Пустой хеш не принимается независимо от настроек
    min_bytes = max(min_bytes, 1)

    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidHashError(
            f"Invalid hash: must be bytes, got {type(value).__name__}", field=field
        )

    value = bytes(value)
    if not min_bytes <= len(value) <= max_bytes:
        if min_bytes == max_bytes:
            expected = f"exactly {max_bytes}"
        else:
            expected = f"between {min_bytes} and {max_bytes}"
        raise InvalidHashError(
            f"Invalid hash: must be {expected} bytes long, is {len(value)}", field=field
        )
    return value


def parse_hash_hex(text: str, field: str = "hash") -> bytes:
    """
    Декодировать хеш из hex-строки и проверить длину.

    Примеры:
        "9f86d081" -> b"\\x9f\\x86\\xd0\\x81"
        "9F86D081" -> b"\\x9f\\x86\\xd0\\x81"
        "xyz"      -> InvalidHashError
        "9f 86"    -> InvalidHashError
    """
    try:
        if not HEX_PATTERN.fullmatch(text):
            raise ValueError(text)
        value = bytes.fromhex(text)
    except (TypeError, ValueError):
        raise InvalidHashError(
            f"Invalid hash: '{text}' is not a hex string", field=field
        ) from None
    return validate_hash(value, field=field)


def validate_tags(
    tags: Iterable[str], field: str = "tags", max_length: int | None = None
) -> list[str]:
    """
    Проверить имена тегов и убрать дубликаты (порядок первого вхождения сохраняется).

    Правила:
    - тег не пустой
    - не длиннее max_length символов (по умолчанию settings.TAG_MAX_LENGTH)
    - без NUL-символа (PostgreSQL TEXT его не хранит)
    - различных тегов не больше settings.MAX_TAGS_PER_CALL

    Семантику тегов не интерпретируем: регистр и пробелы сохраняются как есть.

    Raises:
        InvalidTagError: Хотя бы один тег некорректен (ничего не записывается)
    """
    max_length = settings.TAG_MAX_LENGTH if max_length is None else max_length

    unique: dict[str, None] = {}
    for tag in tags:
        if not isinstance(tag, str):
            raise InvalidTagError(f"Invalid tag {tag!r}: must be a string", field=field)
        if not tag or len(tag) > max_length:
            raise InvalidTagError(
                f"Invalid tag '{tag}': must be between 1 and {max_length} characters, "
                f"is {len(tag)}",
                field=field,
            )
        if "\x00" in tag:
            raise InvalidTagError(f"Invalid tag {tag!r}: must not contain NUL", field=field)
        unique.setdefault(tag, None)

    validate_batch_size(unique, settings.MAX_TAGS_PER_CALL, field, "tags")
    return list(unique)


def validate_batch_size(items: Sized, limit: int, field: str, what: str) -> None:
    """
    Проверить, что один вызов не превышает лимит элементов.

    Слишком большой вход - ошибка аргумента, а не хранилища: повтор
    того же запроса всё равно не пройдёт.

    Raises:
        InvalidArgumentError: len(items) > limit
    """
    if len(items) > limit:
        raise InvalidArgumentError(
            field, f"Too many {what}: at most {limit} per call, got {len(items)}"
        )
