"""
Модуль: `services/__init__.py`.
Назначение: Хранилище галереи, файловое хранилище изображений и сессии администратора.
"""
