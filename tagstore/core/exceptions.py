"""Domain exceptions raised by the tag store."""


class TagStoreError(Exception):
    """Base class for all tag store errors."""

    retryable: bool = False


class InvalidArgumentError(TagStoreError, ValueError):
    """
    Некорректный входной параметр.

    Проверяется до любого обращения к хранилищу, поэтому вызов
    не оставляет после себя никаких изменений. Повтор не поможет.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


class InvalidHashError(InvalidArgumentError):
    """Hash is empty, not valid hex, or outside the accepted length range."""

    def __init__(self, message: str, field: str = "hash"):
        super().__init__(field, message)


class InvalidTagError(InvalidArgumentError):
    """Tag name is empty or too long."""

    def __init__(self, message: str, field: str = "tags"):
        super().__init__(field, message)


class StorageError(TagStoreError):
    """
    Ошибка хранилища: БД недоступна, deadlock, конфликт сериализации, таймаут.

    Операция целиком откатывается. Все операции идемпотентны,
    поэтому вызывающая сторона может безопасно повторить запрос.
    """

    retryable = True
