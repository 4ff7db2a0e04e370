"""
Модуль: `extensions.py`.
Назначение: Экземпляры Flask-расширений галереи (БД, вход администратора, CORS, локализация).
"""

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_babel import Babel

# Создаются без приложения, привязываются в create_app()
db = SQLAlchemy()
login_manager = LoginManager()
cors = CORS()
babel = Babel()
