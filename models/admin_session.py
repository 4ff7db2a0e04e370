"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: models/admin_session.py – сессии администратора.

Назначение модуля:
- Хранение выданных при входе сессий (хеш токена, срок действия, отзыв).
- Модель служит «пользователем» Flask-Login: активна, пока не истекла и не отозвана.
"""

from datetime import datetime

from flask_login import UserMixin

from extensions import db


class AdminSession(UserMixin, db.Model):
    """Класс `AdminSession` описывает одну авторизованную сессию администратора."""
    id = db.Column(db.Integer, primary_key=True)
    token_hash = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    revoked_at = db.Column(db.DateTime, nullable=True)

    def is_valid_at(self, moment: datetime) -> bool:
        return self.revoked_at is None and self.expires_at > moment

    @property
    def is_active(self) -> bool:
        return self.is_valid_at(datetime.utcnow())
