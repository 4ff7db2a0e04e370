"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: services/blob_store.py – хранилище файлов изображений.

Назначение модуля:
- Интерфейс BlobStore: сохранение байтов изображения и удаление по ссылке.
- Локальная реализация LocalBlobStore поверх папки UPLOAD_FOLDER.
- Любая ошибка файловой системы превращается в BlobStoreError.
"""

import os
import uuid
from datetime import datetime

from flask_babel import gettext as _
from werkzeug.utils import secure_filename

from services.errors import BlobStoreError


class BlobStore:
    """Внешнее хранилище двоичных данных изображений."""

    def save(self, data: bytes, extension: str) -> str:
        """Сохраняет данные и возвращает устойчивую ссылку на них."""
        raise NotImplementedError

    def delete(self, reference: str) -> None:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    """Хранит изображения файлами в локальной папке."""

    def __init__(self, folder: str):
        self.folder = folder

    def _path_for(self, reference: str) -> str:
        # Ссылка обязана быть простым именем файла внутри папки
        if not reference or secure_filename(reference) != reference:
            raise BlobStoreError(_("Некорректная ссылка на файл изображения"))
        return os.path.join(self.folder, reference)

    def save(self, data: bytes, extension: str) -> str:
        timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
        reference = f"{timestamp}_{uuid.uuid4().hex[:12]}.{extension}"
        path = self._path_for(reference)
        try:
            os.makedirs(self.folder, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise BlobStoreError(_("Не удалось сохранить файл изображения")) from e
        return reference

    def delete(self, reference: str) -> None:
        path = self._path_for(reference)
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise BlobStoreError(_("Не удалось удалить файл изображения")) from e
