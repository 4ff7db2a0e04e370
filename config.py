"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: config.py – конфигурация приложения.

Назначение модуля:
- Определение базовых параметров приложения Flask (секретный ключ, строка подключения к БД).
- Настройка администраторского входа (пароль, время жизни сессии, ограничение попыток).
- Настройка параметров загрузки изображений (папка, максимальный размер, допустимые форматы).
"""

import os
import warnings


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Преобразует переменную окружения в bool."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(name: str, default: int) -> int:
    """Преобразует переменную окружения в int."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str] | None = None) -> list[str]:
    """Преобразует переменную окружения вида 'a,b,c' в список."""
    value = os.environ.get(name)
    if value is None:
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


def _is_production() -> bool:
    """Определяет production-режим по FLASK_ENV."""
    return os.environ.get("FLASK_ENV", "").strip().lower() == "production"


def _required_secret(name: str, fallback: str, production: bool) -> str:
    """Читает обязательный секрет; вне production подставляет небезопасное значение."""
    value = os.environ.get(name)
    if value:
        return value
    if production:
        raise RuntimeError(
            f"{name} environment variable is required in production. "
            "Set a strong random value before starting the app."
        )
    warnings.warn(
        f"{name} is not set. Using insecure development fallback value.",
        RuntimeWarning,
        stacklevel=2,
    )
    return fallback


class Config:
    """Базовая конфигурация приложения."""

    _PRODUCTION = _is_production()

    SECRET_KEY = _required_secret("SECRET_KEY", "dev-insecure-secret-key", _PRODUCTION)
    ADMIN_PASSWORD = _required_secret("ADMIN_PASSWORD", "change-this", _PRODUCTION)
    ADMIN_SESSION_TTL_HOURS = _get_env_int("ADMIN_SESSION_TTL_HOURS", 24)

    LOGIN_RATE_LIMIT = _get_env_int("LOGIN_RATE_LIMIT", 10)
    LOGIN_RATE_WINDOW_SECONDS = _get_env_int("LOGIN_RATE_WINDOW_SECONDS", 10 * 60)
    UPLOAD_RATE_LIMIT = _get_env_int("UPLOAD_RATE_LIMIT", 40)
    UPLOAD_RATE_WINDOW_SECONDS = _get_env_int("UPLOAD_RATE_WINDOW_SECONDS", 10 * 60)
    # Число обратных прокси перед приложением; 0 – X-Forwarded-For игнорируется
    TRUSTED_PROXY_COUNT = _get_env_int("TRUSTED_PROXY_COUNT", 0)

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:////app/instance/gallery.db" if _PRODUCTION else "sqlite:///gallery.db",
    )
    if SQLALCHEMY_DATABASE_URI.startswith("postgres://"):
        # Хостинги выдают postgres://, SQLAlchemy ожидает postgresql://
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    CSRF_ENABLED = _get_env_bool("CSRF_ENABLED", default=True)
    SESSION_COOKIE_SECURE = _get_env_bool("SESSION_COOKIE_SECURE", default=_PRODUCTION)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")

    CORS_ENABLED = _get_env_bool("CORS_ENABLED", default=False)
    CORS_ORIGINS = _get_env_list(
        "CORS_ORIGINS",
        default=[
            "http://127.0.0.1:5000",
            "http://localhost:5000",
        ],
    )

    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "static/uploads")
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024
    ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "webp"}
    ALLOWED_IMAGE_FORMATS = {"png", "jpeg", "webp"}
    MAX_IMAGE_PIXELS = _get_env_int("MAX_IMAGE_PIXELS", 40_000_000)

    SUPPORTED_LANGUAGES = ("ru", "en")
    DEFAULT_LANGUAGE = os.environ.get("DEFAULT_LANGUAGE", "en").strip().lower() or "en"
    LANG_COOKIE_NAME = os.environ.get("LANG_COOKIE_NAME", "site_lang").strip() or "site_lang"
