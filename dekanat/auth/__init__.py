"""
Блюпринт аутентификации
"""
from flask import Blueprint

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

from dekanat.auth import routes
