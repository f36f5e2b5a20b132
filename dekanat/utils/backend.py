"""
Доступ к REST-бэкенду из маршрутов.

Клиент создается на каждый запрос с токеном и куками текущей сессии.
Фабрику можно подменить через app.extensions['dekanat_backend_factory'].
"""
from flask import current_app, g

from dekanat_core.backend_client import Backend, BackendClient

EXTENSION_KEY = 'dekanat_backend_factory'


def default_backend_factory(app, token=None, cookies=None):
    client = BackendClient(
        base_url=app.config['DEKANAT_API_URL'],
        timeout_seconds=app.config['DEKANAT_API_TIMEOUT'],
        token=token,
        cookies=dict(cookies or {}),
    )
    return Backend(client)


def init_backend(app):
    app.extensions.setdefault(EXTENSION_KEY, default_backend_factory)


def get_backend():
    """Клиент бэкенда для текущего запроса"""
    if 'backend' not in g:
        # Маршруты пакета auth сами импортируют этот модуль
        from dekanat.auth.session_store import session_store

        factory = current_app.extensions[EXTENSION_KEY]
        g.backend = factory(
            current_app._get_current_object(),
            token=session_store.token,
            cookies=session_store.backend_cookies,
        )
    return g.backend
