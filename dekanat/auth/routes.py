"""
Маршруты аутентификации
"""
import logging
from flask import render_template, request, redirect, url_for, flash
from flask_login import current_user

from dekanat.auth import auth_bp
from dekanat.auth.forms import LoginForm, RegisterForm
from dekanat.auth.rbac_utils import safe_next_url
from dekanat.auth.session_store import session_store
from dekanat.utils.backend import get_backend
from dekanat_core.audit_logger import audit_logger
from dekanat_core.backend_client import BackendError

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = 'Неверный логин или пароль.'
REGISTER_FAILED_MESSAGE = 'Не удалось зарегистрироваться.'


def _open_session(backend, email, password):
    """Вход на бэкенде и сохранение личности, токена и кук в сессии консоли"""
    identity, token = backend.auth.login(email, password)
    session_store.login(identity, token=token, cookies=backend.session_cookies())
    return identity


def _redirect_after_login():
    next_page = safe_next_url(request.args.get('next'))
    return redirect(next_page or url_for('main.index'))


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Страница входа"""
    if current_user.is_authenticated:
        return _redirect_after_login()

    form = LoginForm()
    if form.validate_on_submit():
        email = form.email.data.strip()
        try:
            _open_session(get_backend(), email, form.password.data)
        except BackendError as e:
            logger.info(f"Login failed for {email}: {e.message}")
            audit_logger.log(action='login_failed', entity='User', status='error', user_email=email,
                             metadata={'error': e.message, 'status_code': e.status_code})
            flash(e.message if e.status_code not in (None, 401, 403) else LOGIN_FAILED_MESSAGE, 'danger')
        else:
            flash('Вход выполнен успешно!', 'success')
            return _redirect_after_login()

    return render_template('auth/login.html', form=form, next_url=safe_next_url(request.args.get('next')))


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """Регистрация с последующим входом"""
    if current_user.is_authenticated:
        return redirect(url_for('main.index'))

    form = RegisterForm()
    if form.validate_on_submit():
        email = form.email.data.strip()
        backend = get_backend()
        try:
            backend.auth.register(email, form.password.data)
            _open_session(backend, email, form.password.data)
        except BackendError as e:
            logger.info(f"Registration failed for {email}: {e.message}")
            audit_logger.log(action='register_failed', entity='User', status='error', user_email=email,
                             metadata={'error': e.message})
            flash(e.message or REGISTER_FAILED_MESSAGE, 'danger')
        else:
            audit_logger.log(action='register', entity='User', user_email=email)
            flash('Регистрация прошла успешно!', 'success')
            return _redirect_after_login()

    return render_template('auth/register.html', form=form)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Выход из системы. Ошибка выхода на бэкенде не мешает очистить локальную сессию"""
    if current_user.is_authenticated:
        try:
            get_backend().auth.logout()
        except BackendError as e:
            logger.warning(f"Backend logout failed for {current_user.email}: {e.message}")
        session_store.logout()
        flash('Вы вышли из системы.', 'info')

    return redirect(url_for('main.index'))
