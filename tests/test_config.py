"""
Тесты для настроек (Settings).

Лимиты не должны выходить за то, что способна принять БД:
иначе некорректный ввод превращается в retryable StorageError.
"""

import pytest
from pydantic import ValidationError

from tagstore.core.config import Settings
from tagstore.models import TAG_NAME_LENGTH


def test_tag_max_length_defaults_to_column_size():
    """Test: по умолчанию TAG_MAX_LENGTH равен размеру колонки tags.name."""
    assert Settings(_env_file=None).TAG_MAX_LENGTH == TAG_NAME_LENGTH


def test_tag_max_length_cannot_exceed_column(monkeypatch):
    """Test: TAG_MAX_LENGTH больше размера колонки - ошибка конфигурации."""
    monkeypatch.setenv("TAG_MAX_LENGTH", str(TAG_NAME_LENGTH + 1))

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_tag_max_length_can_be_lowered(monkeypatch):
    """Test: более строгий лимит допустим."""
    monkeypatch.setenv("TAG_MAX_LENGTH", "64")

    assert Settings(_env_file=None).TAG_MAX_LENGTH == 64


@pytest.mark.parametrize(
    "name,value",
    [
        ("MAX_BATCH_HASHES", "40000"),
        ("MAX_BATCH_HASHES", "0"),
        ("MAX_TAGS_PER_CALL", "0"),
    ],
)
def test_batch_limits_bounds(monkeypatch, name, value):
    """Test: лимиты пакетов вне допустимых границ отклоняются."""
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
