"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: utils/image_processor.py – проверка загружаемых изображений.

Назначение модуля:
- Проверка, что присланные байты действительно являются изображением (Pillow).
- Ограничение формата и разрешения изображения.
- Определение расширения файла по фактическому формату, а не по имени.
"""

import io

from PIL import Image, UnidentifiedImageError
from flask import current_app
from flask_babel import gettext as _

from services.errors import ValidationError

FORMAT_TO_EXTENSION = {"jpeg": "jpg", "png": "png", "webp": "webp"}


def detect_image_extension(data: bytes) -> str:
    """Проверяет изображение и возвращает расширение для его сохранения."""
    allowed_formats = current_app.config["ALLOWED_IMAGE_FORMATS"]
    max_pixels = current_app.config["MAX_IMAGE_PIXELS"]

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        raise ValidationError(_("Файл не является корректным изображением"))

    # После verify() объект нельзя использовать, открываем повторно
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = (image.format or "").lower()
            width, height = image.size
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        raise ValidationError(_("Файл не является корректным изображением"))

    if image_format not in allowed_formats or image_format not in FORMAT_TO_EXTENSION:
        raise ValidationError(_("Недопустимый формат изображения"))

    if width * height > max_pixels:
        raise ValidationError(_("Изображение слишком большое по разрешению"))

    return FORMAT_TO_EXTENSION[image_format]
