"""
Основные маршруты приложения
"""
from flask import render_template, request

from dekanat.auth.rbac_utils import safe_next_url
from dekanat.main import main_bp

@main_bp.route('/index')
@main_bp.route('/')
def index():
    """Стартовая страница. Сюда же перенаправляют при отказе в доступе (с ?next=)"""
    return render_template('index.html', next_url=safe_next_url(request.args.get('next')))
