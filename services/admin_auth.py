"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: services/admin_auth.py – вход администратора и сессии.

Назначение модуля:
- Проверка пароля администратора (сравнение за постоянное время).
- Выдача сессии с токеном и сроком действия (по умолчанию 24 часа).
- Поиск активной сессии по id (cookie Flask-Login) или по bearer-токену.
- Отзыв сессии при выходе и очистка истёкших записей.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta

from flask import current_app

from extensions import db
from models.admin_session import AdminSession


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def check_admin_password(candidate: str | None) -> bool:
    """Сравнивает введённый пароль с ADMIN_PASSWORD."""
    expected = current_app.config.get("ADMIN_PASSWORD") or ""
    if not candidate or not expected:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def issue_admin_session() -> tuple[AdminSession, str]:
    """Создаёт новую сессию и возвращает её вместе с открытым токеном.

    В базе хранится только SHA-256 токена, сам токен отдаётся клиенту один раз.
    """
    ttl_hours = max(1, int(current_app.config.get("ADMIN_SESSION_TTL_HOURS", 24)))
    now = datetime.utcnow()
    token = secrets.token_urlsafe(32)

    admin_session = AdminSession(
        token_hash=_hash_token(token),
        created_at=now,
        expires_at=now + timedelta(hours=ttl_hours),
    )
    db.session.add(admin_session)
    db.session.commit()
    return admin_session, token


def find_admin_session(session_id) -> AdminSession | None:
    try:
        admin_session = db.session.get(AdminSession, int(session_id))
    except (TypeError, ValueError):
        return None
    if admin_session is None or not admin_session.is_active:
        return None
    return admin_session


def find_admin_session_by_token(token: str | None) -> AdminSession | None:
    if not token:
        return None
    admin_session = AdminSession.query.filter_by(token_hash=_hash_token(token)).first()
    if admin_session is None or not admin_session.is_active:
        return None
    return admin_session


def revoke_admin_session(admin_session: AdminSession) -> None:
    if admin_session.revoked_at is None:
        admin_session.revoked_at = datetime.utcnow()
        db.session.commit()


def purge_expired_sessions() -> int:
    """Удаляет истёкшие и отозванные сессии, возвращает число удалённых."""
    now = datetime.utcnow()
    removed = AdminSession.query.filter(
        db.or_(AdminSession.expires_at <= now, AdminSession.revoked_at.is_not(None))
    ).delete(synchronize_session=False)
    db.session.commit()
    return removed
