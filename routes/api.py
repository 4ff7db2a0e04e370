"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: routes/api.py – REST-подобные API-маршруты.

Назначение модуля:
- Чтение категорий и картин (доступно всем).
- Создание, переименование и удаление категорий (только администратор).
- Загрузка, правка и удаление картин (только администратор).
- Выдача загруженных изображений из папки UPLOAD_FOLDER.
"""

from flask import current_app, jsonify, request, send_from_directory
from flask_babel import gettext as _
from flask_login import current_user

from models.painting import EDITABLE_FIELDS
from services.errors import ValidationError
from services.gallery_store import get_gallery_store, require_admin
from utils.rate_limit import is_rate_limited


def _allowed_file(filename: str) -> bool:
    if "." not in filename:
        return False
    return filename.rsplit(".", 1)[1].lower() in current_app.config["ALLOWED_EXTENSIONS"]


def _api_error(message: str, status: int = 400, code: str = "error"):
    return jsonify({"success": False, "error": message, "code": code}), status


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _is_admin() -> bool:
    return current_user.is_authenticated


def register_routes(app):
    @app.get("/api/categories")
    def list_categories():
        categories = get_gallery_store().list_categories()
        return jsonify([category.to_dict() for category in categories])

    @app.post("/api/categories")
    def create_category():
        data = _json_body()
        category = get_gallery_store().create_category(data.get("name"), authenticated=_is_admin())
        return jsonify({"success": True, "category": category.to_dict()}), 201

    @app.put("/api/categories/<int:category_id>")
    def rename_category(category_id: int):
        """Переименовать категорию; картины получают новое название."""
        data = _json_body()
        category = get_gallery_store().rename_category(
            category_id, data.get("name"), authenticated=_is_admin()
        )
        return jsonify({"success": True, "category": category.to_dict()})

    @app.delete("/api/categories/<int:category_id>")
    def delete_category(category_id: int):
        """Удалить категорию; её картины переходят в «Uncategorized»."""
        moved = get_gallery_store().delete_category(category_id, authenticated=_is_admin())
        return jsonify({"success": True, "reassigned": moved})

    @app.get("/api/paintings")
    def list_paintings():
        paintings = get_gallery_store().list_paintings(
            category=request.args.get("category"),
            search=request.args.get("q"),
        )
        return jsonify([painting.to_dict() for painting in paintings])

    @app.get("/api/paintings/<int:painting_id>")
    def get_painting(painting_id: int):
        return jsonify(get_gallery_store().get_painting(painting_id).to_dict())

    @app.post("/api/paintings")
    def create_painting():
        """Загрузка новой картины: multipart-форма с полем image и описанием."""
        # Анонимный запрос отклоняем до учёта в лимите загрузок
        require_admin(_is_admin())

        if is_rate_limited(
            f"painting_upload:session:{current_user.id}",
            limit=app.config["UPLOAD_RATE_LIMIT"],
            window_seconds=app.config["UPLOAD_RATE_WINDOW_SECONDS"],
        ):
            return _api_error(_("Слишком много загрузок. Попробуйте позже."), 429, "rate_limited")

        image_bytes = None
        file = request.files.get("image")
        # Проверяем, что администратор действительно выбрал файл
        if file is not None and file.filename:
            if not _allowed_file(file.filename):
                raise ValidationError(_("Недопустимый тип файла"))
            image_bytes = file.read()

        fields = {field: request.form[field] for field in EDITABLE_FIELDS if field in request.form}
        painting = get_gallery_store().create_painting(fields, image_bytes, authenticated=_is_admin())
        return jsonify({"success": True, "painting": painting.to_dict()}), 201

    @app.put("/api/paintings/<int:painting_id>")
    def update_painting(painting_id: int):
        data = _json_body()
        fields = {field: data[field] for field in EDITABLE_FIELDS if field in data}
        painting = get_gallery_store().update_painting(painting_id, fields, authenticated=_is_admin())
        return jsonify({"success": True, "painting": painting.to_dict()})

    @app.delete("/api/paintings/<int:painting_id>")
    def delete_painting(painting_id: int):
        get_gallery_store().delete_painting(painting_id, authenticated=_is_admin())
        return jsonify({"success": True})

    @app.route("/uploads/<filename>")
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)
