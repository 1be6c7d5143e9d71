"""Core application components."""

from .config import Settings, settings
from .database import (
    AsyncSessionLocal,
    create_engine,
    create_session_factory,
    drop_db,
    engine,
    init_db,
)
from .exceptions import (
    InvalidArgumentError,
    InvalidHashError,
    InvalidTagError,
    StorageError,
    TagStoreError,
)

__all__ = [
    "settings",
    "Settings",
    "engine",
    "AsyncSessionLocal",
    "create_engine",
    "create_session_factory",
    "init_db",
    "drop_db",
    "TagStoreError",
    "InvalidArgumentError",
    "InvalidHashError",
    "InvalidTagError",
    "StorageError",
]
