"""
Хранилище сессии консоли: единственное место, где меняется текущая личность.

Личность, токен и куки бэкенда лежат в подписанной cookie-сессии Flask.
Остальной код только читает состояние через current_session(), а об
изменениях узнает по сигналу identity_changed.
"""
import logging

from blinker import Namespace
from flask import session
from flask_login import UserMixin, current_user, login_user, logout_user

from dekanat_core.session_gate import ANONYMOUS, Session, UserIdentity

logger = logging.getLogger(__name__)

_signals = Namespace()

# sender - SessionStore, kwargs: event ('login' | 'logout' | 'roles'), identity (None после выхода), previous
identity_changed = _signals.signal('identity-changed')

IDENTITY_KEY = 'identity'
TOKEN_KEY = 'backend_token'
COOKIES_KEY = 'backend_cookies'


class ConsoleUser(UserMixin):
    """Пользователь Flask-Login поверх UserIdentity"""

    def __init__(self, identity):
        self.identity = identity

    def get_id(self):
        return self.identity.email

    @property
    def email(self):
        return self.identity.email

    @property
    def roles(self):
        return self.identity.roles


def load_user(user_id):
    """Загрузка пользователя для Flask-Login: восстанавливаем из сессии"""
    identity = UserIdentity.from_dict(session.get(IDENTITY_KEY))
    if identity is None or identity.email != user_id:
        return None
    return ConsoleUser(identity)


class SessionStore:

    def current(self):
        identity = UserIdentity.from_dict(session.get(IDENTITY_KEY))
        return Session(identity) if identity else ANONYMOUS

    @property
    def token(self):
        return session.get(TOKEN_KEY)

    @property
    def backend_cookies(self):
        return dict(session.get(COOKIES_KEY) or {})

    def login(self, identity, token=None, cookies=None):
        previous = UserIdentity.from_dict(session.get(IDENTITY_KEY))
        session[IDENTITY_KEY] = identity.to_dict()
        session[TOKEN_KEY] = token
        session[COOKIES_KEY] = dict(cookies or {})
        login_user(ConsoleUser(identity))
        logger.info(f"Session opened for {identity.email} (roles: {', '.join(sorted(identity.roles)) or '-'})")
        identity_changed.send(self, event='login', identity=identity, previous=previous)

    def update_roles(self, roles):
        """Роли текущего пользователя поменялись на бэкенде (например, админ снял роль сам с себя)"""
        identity = UserIdentity.from_dict(session.get(IDENTITY_KEY))
        if identity is None:
            return
        updated = UserIdentity(identity.email, frozenset(roles))
        if updated == identity:
            return
        session[IDENTITY_KEY] = updated.to_dict()
        identity_changed.send(self, event='roles', identity=updated, previous=identity)

    def logout(self):
        previous = UserIdentity.from_dict(session.get(IDENTITY_KEY))
        for key in (IDENTITY_KEY, TOKEN_KEY, COOKIES_KEY):
            session.pop(key, None)
        logout_user()
        if previous is not None:
            logger.info(f"Session closed for {previous.email}")
            identity_changed.send(self, event='logout', identity=None, previous=previous)


session_store = SessionStore()


def current_session():
    """Текущая сессия для проверок доступа"""
    if current_user.is_authenticated:
        return Session(current_user.identity)
    return ANONYMOUS
