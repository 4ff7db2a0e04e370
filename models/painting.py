"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: models/painting.py – модель картины.

Назначение модуля:
- Описание ORM-модели Painting (описательные поля и ссылка на файл изображения).
- Поле category хранит название категории (мягкая ссылка без внешнего ключа).
"""

from datetime import datetime

from flask import url_for

from extensions import db

# Поля, которые администратор может задавать при создании и правке
EDITABLE_FIELDS = ("title", "date", "materials", "location", "description", "category")


class Painting(db.Model):
    """Класс `Painting` описывает картину галереи."""
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False, default="")
    # Дата хранится как свободный текст и сортируется лексикографически
    date = db.Column(db.String(255), nullable=False, default="")
    materials = db.Column(db.String(255), nullable=False, default="")
    location = db.Column(db.String(255), nullable=False, default="")
    description = db.Column(db.Text, nullable=False, default="")
    category = db.Column(db.String(100), nullable=False, index=True)
    image_filename = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Представление картины для JSON-ответов API."""
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "materials": self.materials,
            "location": self.location,
            "description": self.description,
            "category": self.category,
            "image_filename": self.image_filename,
            "image_url": url_for("uploaded_file", filename=self.image_filename),
        }

    def __repr__(self):
        return f"<Painting {self.id} {self.title!r}>"
