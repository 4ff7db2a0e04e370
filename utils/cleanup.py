"""
Модуль: `utils/cleanup.py`.
Назначение: Обслуживающие задачи – очистка истёкших сессий и исправление ссылок картин на категории.
"""

from flask import current_app

from services.admin_auth import purge_expired_sessions
from services.gallery_store import get_gallery_store


def cleanup_expired_sessions() -> int:
    """Удаляет истёкшие и отозванные сессии администратора."""
    removed = purge_expired_sessions()
    current_app.logger.info("Удалено устаревших сессий администратора: %d", removed)
    return removed


def repair_category_references() -> int:
    """Переносит картины с несуществующей категорией в существующие."""
    return get_gallery_store().repair_category_references()


def register_commands(app):
    """Регистрирует CLI-команды обслуживания (`flask cleanup-sessions` и др.)."""

    @app.cli.command("cleanup-sessions")
    def cleanup_sessions_command():
        """Удалить истёкшие и отозванные сессии администратора."""
        removed = cleanup_expired_sessions()
        print(f"Удалено сессий: {removed}")

    @app.cli.command("repair-categories")
    def repair_categories_command():
        """Исправить картины, ссылающиеся на несуществующие категории."""
        repaired = repair_category_references()
        print(f"Исправлено картин: {repaired}")
