"""
Название: «Галерея»
Язык: Python (Flask)
Краткое описание: веб-приложение для публикации картин по категориям с
администраторской панелью (загрузка, правка и удаление картин и категорий)
"""

import hmac
import os

from flask import Flask, g, jsonify, request, session
from flask_babel import gettext as _
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config
from extensions import db, login_manager, cors, babel
import models  # noqa: F401 - регистрирует модели для db.create_all()
from routes.auth import bearer_token, register_routes as register_auth_routes
from routes.api import register_routes as register_api_routes
from services.admin_auth import find_admin_session_by_token
from services.blob_store import LocalBlobStore
from services.errors import GalleryError, UnauthorizedError
from services.gallery_store import get_gallery_store
from utils.cleanup import cleanup_expired_sessions, register_commands
from utils.i18n import resolve_request_language
from utils.rate_limit import InMemoryRateLimiter


def create_app(config_object=Config, test_config: dict | None = None) -> Flask:
    """Фабрика приложения, собирающая все модули воедино."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    if test_config:
        app.config.update(test_config)

    upload_folder = app.config["UPLOAD_FOLDER"]
    if not os.path.isabs(upload_folder):
        upload_folder = os.path.join(app.root_path, upload_folder)
    app.config["UPLOAD_FOLDER"] = upload_folder

    # Инициализация расширений
    db.init_app(app)
    login_manager.init_app(app)

    # Вне запроса (CLI, прямые вызовы хранилища) g.lang не задан
    def select_locale() -> str:
        return getattr(g, "lang", app.config["DEFAULT_LANGUAGE"])

    babel.init_app(app, locale_selector=select_locale)

    @app.before_request
    def set_request_language():
        g.lang = resolve_request_language(
            request=request,
            supported_languages=app.config["SUPPORTED_LANGUAGES"],
            cookie_name=app.config["LANG_COOKIE_NAME"],
            default_language=app.config["DEFAULT_LANGUAGE"],
        )

    if app.config["TRUSTED_PROXY_COUNT"] > 0:
        # IP клиента берётся из X-Forwarded-For только за доверенными прокси
        proxies = app.config["TRUSTED_PROXY_COUNT"]
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxies, x_proto=proxies, x_host=proxies)

    if app.config["CORS_ENABLED"]:
        cors.init_app(
            app,
            resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
            supports_credentials=True,
        )

    app.extensions["rate_limiter"] = InMemoryRateLimiter()
    app.extensions["blob_store"] = LocalBlobStore(upload_folder)

    # Гарантируем наличие служебных директорий
    os.makedirs(app.instance_path, exist_ok=True)
    os.makedirs(upload_folder, exist_ok=True)

    # Регистрация роутов по модулям
    register_auth_routes(app)
    register_api_routes(app)
    register_commands(app)

    with app.app_context():
        # Создаем отсутствующие таблицы (без изменения существующих колонок)
        db.create_all()
        get_gallery_store().ensure_default_category()

    def _is_csrf_valid() -> bool:
        expected = session.get("csrf_token")
        provided = request.headers.get("X-CSRF-Token") or request.form.get("csrf_token")
        if not expected or not provided:
            return False
        return hmac.compare_digest(expected, provided)

    @app.before_request
    def enforce_csrf():
        """Проверяет CSRF-токен у всех изменяющих запросов с cookie-сессией."""
        if not app.config["CSRF_ENABLED"]:
            return None

        if request.method in {"GET", "HEAD", "OPTIONS", "TRACE"}:
            return None

        # Действующий bearer-токен не опирается на cookie; недействительный отклоняем сразу
        token = bearer_token(request)
        if token:
            if find_admin_session_by_token(token) is None:
                raise UnauthorizedError(_("Недействительный токен доступа"))
            return None

        if _is_csrf_valid():
            return None

        return (
            jsonify(
                {
                    "success": False,
                    "error": _("Недействительный CSRF-токен. Обновите страницу и повторите попытку."),
                    "code": "csrf",
                }
            ),
            400,
        )

    @app.errorhandler(GalleryError)
    def handle_gallery_error(error: GalleryError):
        if error.status >= 500:
            app.logger.error("Ошибка хранилища изображений: %s", error.message)
        return jsonify(error.to_dict()), error.status

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error: SQLAlchemyError):
        db.session.rollback()
        app.logger.exception("Ошибка базы данных при обработке %s %s", request.method, request.path)
        return jsonify({"success": False, "error": _("Внутренняя ошибка сервера"), "code": "internal"}), 500

    @app.after_request
    def apply_security_headers(response):
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Permissions-Policy", "camera=(), microphone=(), geolocation=()")
        return response

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    return app


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        # Очистка истёкших сессий при запуске приложения
        cleanup_expired_sessions()
    is_production = os.environ.get("FLASK_ENV", "").lower() == "production"
    app.run(debug=not is_production)
