"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: services/gallery_store.py – хранилище категорий и картин.

Назначение модуля:
- CRUD-операции над категориями и картинами, доступные маршрутам и CLI.
- Поддержание инварианта: поле Painting.category всегда совпадает с названием
  существующей категории. Удаление категории переносит её картины в
  «Uncategorized», переименование переносит новое название на картины;
  обе записи выполняются в одной транзакции.
- Проверка права на изменение: каждая изменяющая операция получает явный
  флаг `authenticated` от слоя сессий и без него ничего не меняет.
- Политика ошибок файлового хранилища: сбой при сохранении отменяет создание
  картины, сбой при удалении только записывается в лог.
"""

from flask import current_app
from flask_babel import gettext as _
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from models.category import Category, DEFAULT_CATEGORY_NAME
from models.painting import EDITABLE_FIELDS, Painting
from services.blob_store import BlobStore
from services.errors import BlobStoreError, NotFoundError, UnauthorizedError, ValidationError
from utils.image_processor import detect_image_extension

ALL_CATEGORIES = "All"
MAX_NAME_LENGTH = 100
MAX_FIELD_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 5000

_SEARCH_FIELDS = ("title", "description", "location", "materials")


def require_admin(authenticated: bool) -> None:
    if not authenticated:
        raise UnauthorizedError(_("Требуется вход администратора"))


def _clean_category_name(raw_name) -> str:
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    if not name:
        raise ValidationError(_("Название категории не может быть пустым"))
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(_("Название категории слишком длинное"))
    return name


def _clean_text_field(field: str, value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    limit = MAX_DESCRIPTION_LENGTH if field == "description" else MAX_FIELD_LENGTH
    if len(value) > limit:
        raise ValidationError(_("Поле %(field)s слишком длинное", field=field))
    return value


class GalleryStore:
    """Единая точка чтения и записи категорий и картин.

    Объект не хранит состояния между вызовами, кроме ссылок на сессию БД и
    файловое хранилище, поэтому безопасен для параллельных запросов.
    """

    def __init__(self, session, blob_store: BlobStore):
        self.session = session
        self.blob_store = blob_store

    # --- Категории ---

    def _find_category_by_name(
        self, name: str, exclude_id: int | None = None, lock: bool = False
    ) -> Category | None:
        query = self.session.query(Category).filter(
            db.func.lower(Category.name) == name.lower()
        )
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    def _get_category(self, category_id: int, lock: bool = False) -> Category:
        # Блокировка строки (FOR UPDATE) до конца транзакции; SQLite её не поддерживает и пропускает
        category = self.session.get(Category, category_id, with_for_update=lock)
        if category is None:
            raise NotFoundError(_("Категория не найдена"))
        return category

    def ensure_default_category(self) -> Category:
        """Создаёт категорию «Uncategorized», если её ещё нет."""
        category = self._find_category_by_name(DEFAULT_CATEGORY_NAME)
        if category is not None:
            return category

        category = Category(name=DEFAULT_CATEGORY_NAME)
        self.session.add(category)
        try:
            self.session.commit()
        except IntegrityError:
            # Параллельный запрос успел создать её первым
            self.session.rollback()
            category = self._find_category_by_name(DEFAULT_CATEGORY_NAME)
        return category

    def list_categories(self) -> list[Category]:
        self.ensure_default_category()
        return (
            self.session.query(Category)
            .order_by(db.func.lower(Category.name), Category.id)
            .all()
        )

    def create_category(self, name, *, authenticated: bool) -> Category:
        require_admin(authenticated)
        name = _clean_category_name(name)

        if self._find_category_by_name(name) is not None:
            raise ValidationError(_("Категория с таким названием уже существует"))

        category = Category(name=name)
        self.session.add(category)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ValidationError(_("Категория с таким названием уже существует"))

        current_app.logger.info("Создана категория %r (id=%s)", category.name, category.id)
        return category

    def rename_category(self, category_id: int, new_name, *, authenticated: bool) -> Category:
        """Переименовывает категорию и переносит новое название на её картины."""
        require_admin(authenticated)
        category = self._get_category(category_id, lock=True)
        new_name = _clean_category_name(new_name)

        if category.is_default:
            raise ValidationError(_("Категорию «Uncategorized» нельзя переименовать"))
        if self._find_category_by_name(new_name, exclude_id=category.id) is not None:
            raise ValidationError(_("Категория с таким названием уже существует"))

        old_name = category.name
        if new_name == old_name:
            return category

        try:
            moved = (
                self.session.query(Painting)
                .filter(Painting.category == old_name)
                .update({Painting.category: new_name}, synchronize_session=False)
            )
            category.name = new_name
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ValidationError(_("Категория с таким названием уже существует"))
        except SQLAlchemyError:
            self.session.rollback()
            raise

        current_app.logger.info(
            "Категория %r переименована в %r, обновлено картин: %d", old_name, new_name, moved
        )
        return category

    def delete_category(self, category_id: int, *, authenticated: bool) -> int:
        """Удаляет категорию, перенося её картины в «Uncategorized».

        Возвращает число перенесённых картин.
        """
        require_admin(authenticated)
        category = self._get_category(category_id, lock=True)
        if category.is_default:
            raise ValidationError(_("Категорию «Uncategorized» нельзя удалить"))

        self.ensure_default_category()
        name = category.name
        try:
            moved = (
                self.session.query(Painting)
                .filter(Painting.category == name)
                .update({Painting.category: DEFAULT_CATEGORY_NAME}, synchronize_session=False)
            )
            self.session.delete(category)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

        current_app.logger.info(
            "Удалена категория %r, перенесено картин в %r: %d", name, DEFAULT_CATEGORY_NAME, moved
        )
        return moved

    def _resolve_category_name(self, raw_name, lock: bool = False) -> str | None:
        """Возвращает каноническое название существующей категории или None."""
        if not isinstance(raw_name, str) or not raw_name.strip():
            return None
        category = self._find_category_by_name(raw_name.strip(), lock=lock)
        return category.name if category is not None else None

    # --- Картины ---

    def _get_painting(self, painting_id: int) -> Painting:
        painting = self.session.get(Painting, painting_id)
        if painting is None:
            raise NotFoundError(_("Картина не найдена"))
        return painting

    def get_painting(self, painting_id: int) -> Painting:
        return self._get_painting(painting_id)

    def list_paintings(self, category: str | None = None, search: str | None = None) -> list[Painting]:
        """Картины от новых к старым.

        Сортировка по полю date идёт как по строке: «2021» окажется после
        «March 2021». Среди одинаковых дат выше та, что добавлена позже.
        """
        query = self.session.query(Painting)

        if category and category != ALL_CATEGORIES:
            query = query.filter(Painting.category == category)

        search = (search or "").strip()
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                db.or_(*(db.func.lower(getattr(Painting, field)).like(pattern) for field in _SEARCH_FIELDS))
            )

        return query.order_by(Painting.date.desc(), Painting.id.desc()).all()

    def create_painting(self, fields: dict, image_bytes: bytes | None, *, authenticated: bool) -> Painting:
        require_admin(authenticated)
        fields = fields or {}

        if not image_bytes:
            raise ValidationError(_("Файл изображения обязателен"))

        values = {
            field: _clean_text_field(field, fields.get(field))
            for field in EDITABLE_FIELDS
            if field != "category"
        }
        self.ensure_default_category()

        extension = detect_image_extension(image_bytes)
        # BlobStoreError пробрасывается до записи строки в БД
        reference = self.blob_store.save(image_bytes, extension)

        try:
            # Категорию ищем уже после загрузки: строка блокируется до commit
            category_name = self._resolve_category_name(fields.get("category"), lock=True)
            values["category"] = category_name or DEFAULT_CATEGORY_NAME
            painting = Painting(image_filename=reference, **values)
            self.session.add(painting)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            self._release_blob(reference)
            raise

        current_app.logger.info(
            "Добавлена картина id=%s (%r) в категорию %r", painting.id, painting.title, painting.category
        )
        return painting

    def update_painting(self, painting_id: int, fields: dict, *, authenticated: bool) -> Painting:
        """Обновляет только переданные поля; ссылку на изображение не меняет."""
        require_admin(authenticated)
        painting = self._get_painting(painting_id)
        fields = fields or {}

        changes = {}
        for field in EDITABLE_FIELDS:
            if field not in fields:
                continue
            if field == "category":
                category_name = self._resolve_category_name(fields[field], lock=True)
                if category_name is None:
                    self.session.rollback()
                    raise ValidationError(_("Категория не найдена"))
                changes[field] = category_name
            else:
                changes[field] = _clean_text_field(field, fields[field])

        for field, value in changes.items():
            setattr(painting, field, value)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

        if changes:
            current_app.logger.info("Картина id=%s обновлена: %s", painting.id, ", ".join(sorted(changes)))
        return painting

    def delete_painting(self, painting_id: int, *, authenticated: bool) -> None:
        require_admin(authenticated)
        painting = self._get_painting(painting_id)
        reference = painting.image_filename

        self._release_blob(reference)

        self.session.delete(painting)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

        current_app.logger.info("Удалена картина id=%s", painting_id)

    def _release_blob(self, reference: str) -> None:
        """Удаляет файл изображения; ошибка хранилища не прерывает операцию."""
        try:
            self.blob_store.delete(reference)
        except BlobStoreError:
            current_app.logger.warning(
                "Не удалось удалить файл изображения %s", reference, exc_info=True
            )

    # --- Обслуживание ---

    def repair_category_references(self) -> int:
        """Исправляет картины, чья категория не совпадает ни с одной существующей.

        Нужна для данных, записанных до того, как переименование стало
        каскадным: варианты названия в другом регистре сводятся к каноническому,
        остальные картины переносятся в «Uncategorized».
        """
        self.ensure_default_category()
        canonical = {c.name.lower(): c.name for c in self.session.query(Category).all()}
        known = set(canonical.values())

        repaired = 0
        try:
            orphans = self.session.query(Painting).filter(Painting.category.not_in(known)).all()
            for painting in orphans:
                painting.category = canonical.get(painting.category.lower(), DEFAULT_CATEGORY_NAME)
                repaired += 1
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

        if repaired:
            current_app.logger.info("Исправлены ссылки на категории у %d картин", repaired)
        return repaired


def get_gallery_store() -> GalleryStore:
    """Хранилище для текущего запроса или CLI-команды."""
    return GalleryStore(db.session, current_app.extensions["blob_store"])
