"""
Скрипт для инициализации базы данных.

Создаёт таблицы hashes, tags, hash_tags напрямую через SQLAlchemy.
Альтернатива - Alembic миграции (migrations/versions).
"""

import asyncio

from tagstore.core.database import init_db


async def main():
    """Создать все таблицы."""
    print("Создание таблиц...")
    await init_db()
    print("✓ Таблицы созданы успешно!")


if __name__ == "__main__":
    asyncio.run(main())
