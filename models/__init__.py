"""
Модуль: `models/__init__.py`.
Назначение: Импорт моделей для корректной регистрации в SQLAlchemy metadata.
"""

from .category import Category, DEFAULT_CATEGORY_NAME
from .painting import Painting
from .admin_session import AdminSession

__all__ = ["Category", "DEFAULT_CATEGORY_NAME", "Painting", "AdminSession"]
