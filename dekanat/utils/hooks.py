"""
Хуки приложения: контекст шаблонов, обработчики ошибок, подписка журнала на смену сессии
"""
import logging
from flask import render_template, request
from flask_login import current_user

from dekanat.auth.permissions import role_label
from dekanat.auth.rbac_utils import visible_nav_items
from dekanat.auth.session_store import identity_changed
from dekanat.models import db
from dekanat_core.audit_logger import audit_logger

logger = logging.getLogger(__name__)


def _audit_identity_change(sender, event=None, identity=None, previous=None, **extra):
    """Вход, выход и смена ролей попадают в журнал"""
    if event == 'login':
        audit_logger.log(action='login', entity='User', user_email=identity.email,
                         metadata={'roles': sorted(identity.roles)})
    elif event == 'logout':
        audit_logger.log(action='logout', entity='User', user_email=previous.email)
    elif event == 'roles':
        audit_logger.log(action='roles_refreshed', entity='User', user_email=identity.email,
                         metadata={'roles': sorted(identity.roles), 'previous': sorted(previous.roles)})


def register_hooks(app):
    """
    Регистрирует контекст-процессоры и обработчики ошибок для приложения
    """
    identity_changed.connect(_audit_identity_change)

    @app.context_processor
    def inject_navigation():
        """Меню строится по той же политике доступа, что и проверки маршрутов"""
        return {
            'nav_items': visible_nav_items(),
            'current_identity': current_user.identity if current_user.is_authenticated else None,
            'role_label': role_label,
        }

    @app.errorhandler(404)
    def not_found(error):
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        logger.error(f"Unhandled error on {request.method} {request.path}: {error}", exc_info=True)
        return render_template('errors/500.html'), 500
