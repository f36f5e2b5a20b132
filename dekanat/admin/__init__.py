"""
Блюпринт админ-панели: пользователи, роли, журнал действий
"""
from flask import Blueprint

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

from dekanat.admin import routes
