"""
Декораторы проверки доступа для маршрутов консоли.
Решение принимает dekanat_core.session_gate.authorize, здесь только реакция на отказ.
"""
import logging
from functools import wraps
from urllib.parse import urlsplit

from flask import flash, redirect, request, url_for

from dekanat.auth.permissions import NAV_ITEMS, roles_for
from dekanat.auth.session_store import current_session
from dekanat_core.session_gate import DENY_ANONYMOUS, authorize

logger = logging.getLogger(__name__)


def can_access(section):
    return bool(authorize(current_session(), roles_for(section)))


def _deny(decision):
    session = current_session()
    who = session.identity.email if session.identity else 'anonymous'
    logger.warning(f"Access denied: {who} tried to access {request.path} ({decision.reason})")

    if decision.reason == DENY_ANONYMOUS:
        flash('Для доступа к разделу необходимо войти.', 'warning')
    else:
        flash('Доступ только для администраторов.', 'danger')
    # Запоминаем, куда шли, чтобы вернуть после входа
    return redirect(url_for('main.index', next=request.full_path.rstrip('?')))


def require_access(section):
    """
    Декоратор для проверки доступа к разделу из ACCESS_POLICY.

    Usage:
        @require_access(ENTITIES_MANAGE)
        def my_view():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            decision = authorize(current_session(), roles_for(section))
            if not decision:
                return _deny(decision)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_roles(*roles):
    """Декоратор для проверки явного набора ролей"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            decision = authorize(current_session(), roles)
            if not decision:
                return _deny(decision)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def visible_nav_items():
    """Пункты меню, доступные текущему пользователю"""
    return [
        {'endpoint': endpoint, 'label': label}
        for endpoint, label, section in NAV_ITEMS
        if can_access(section)
    ]


def safe_next_url(raw):
    """Возврат после входа только на страницы этого же сайта"""
    if not raw or not raw.startswith('/') or raw.startswith('//') or '\\' in raw:
        return None
    parts = urlsplit(raw)
    if parts.scheme or parts.netloc:
        return None
    return raw
