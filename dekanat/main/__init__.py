"""
Основной блюпринт: стартовая страница
"""
from flask import Blueprint

main_bp = Blueprint('main', __name__)

from dekanat.main import routes
