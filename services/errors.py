"""
Модуль: `services/errors.py`.
Назначение: Иерархия ошибок хранилища галереи и их отображение в HTTP-ответы.
"""


class GalleryError(Exception):
    """Базовая ошибка операций галереи."""

    status = 400
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(GalleryError):
    """Некорректные или отсутствующие входные данные."""

    status = 400
    code = "validation"


class NotFoundError(GalleryError):
    status = 404
    code = "not_found"


class UnauthorizedError(GalleryError):
    """Изменяющая операция вызвана без авторизованной сессии администратора."""

    status = 401
    code = "unauthorized"


class BlobStoreError(GalleryError):
    """Не удалось сохранить или удалить файл изображения."""

    status = 502
    code = "blob_store"
