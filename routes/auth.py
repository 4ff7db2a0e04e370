"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: routes/auth.py – вход и выход администратора.

Назначение модуля:
- Вход по паролю администратора с ограничением числа попыток.
- Выход (отзыв сессии) и запрос текущего состояния авторизации.
- Загрузка сессии администратора для Flask-Login из cookie или заголовка Authorization.
"""

import secrets

from flask import current_app, jsonify, request, session
from flask_babel import gettext as _
from flask_login import current_user, login_user, logout_user

from extensions import login_manager
from services.admin_auth import (
    check_admin_password,
    find_admin_session,
    find_admin_session_by_token,
    issue_admin_session,
    revoke_admin_session,
)
from services.errors import UnauthorizedError
from utils.rate_limit import is_rate_limited


@login_manager.user_loader
def load_admin_session(session_id):
    return find_admin_session(session_id)


@login_manager.request_loader
def load_admin_session_from_header(req):
    return find_admin_session_by_token(bearer_token(req))


def bearer_token(req) -> str | None:
    header = req.headers.get("Authorization", "")
    scheme, _sep, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def ensure_csrf_token() -> str:
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def _session_payload():
    payload = {
        "isAdmin": current_user.is_authenticated,
        "expires_at": None,
        "csrf_token": ensure_csrf_token(),
    }
    if current_user.is_authenticated:
        payload["expires_at"] = current_user.expires_at.isoformat() + "Z"
    return payload


def register_routes(app):
    @app.get("/api/session")
    def session_state():
        return jsonify(_session_payload())

    @app.post("/api/login")
    def login():
        if is_rate_limited(
            "login_ip",
            limit=app.config["LOGIN_RATE_LIMIT"],
            window_seconds=app.config["LOGIN_RATE_WINDOW_SECONDS"],
        ):
            return (
                jsonify(
                    {
                        "success": False,
                        "error": _("Слишком много попыток входа. Попробуйте позже."),
                        "code": "rate_limited",
                    }
                ),
                429,
            )

        data = request.get_json(silent=True) or request.form
        password = data.get("password")
        if not isinstance(password, str) or not check_admin_password(password):
            current_app.logger.warning("Неудачная попытка входа администратора")
            raise UnauthorizedError(_("Неверный пароль"))

        if current_user.is_authenticated:
            revoke_admin_session(current_user._get_current_object())
        admin_session, token = issue_admin_session()
        login_user(admin_session)
        current_app.logger.info("Администратор вошёл, сессия id=%s", admin_session.id)

        return jsonify(
            {
                "success": True,
                "isAdmin": True,
                "token": token,
                "expires_at": admin_session.expires_at.isoformat() + "Z",
            }
        )

    @app.post("/api/logout")
    def logout():
        if current_user.is_authenticated:
            current_app.logger.info("Администратор вышел, сессия id=%s", current_user.id)
            revoke_admin_session(current_user._get_current_object())
        logout_user()
        return jsonify({"success": True, "isAdmin": False})
