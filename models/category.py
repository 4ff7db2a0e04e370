"""
Программа: «Галерея» – веб-приложение для публикации картин по категориям.
Модуль: models/category.py – модель категории картин.

Назначение модуля:
- Описание ORM-модели Category.
- Уникальность названия без учёта регистра (функциональный индекс по lower(name)).
- Имя служебной категории по умолчанию, которую нельзя удалить или переименовать.
"""

from datetime import datetime

from extensions import db

DEFAULT_CATEGORY_NAME = "Uncategorized"


class Category(db.Model):
    """Категория картин; картины ссылаются на неё по названию, а не по id."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index("ix_category_name_lower", db.func.lower(name), unique=True),
    )

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_CATEGORY_NAME

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self):
        return f"<Category {self.name}>"
