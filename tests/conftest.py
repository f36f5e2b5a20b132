"""
Общие фикстуры: приложение на SQLite в памяти и бэкенд в памяти вместо REST.
"""
import pytest

from dekanat import create_app
from dekanat.models import AuditLog, db
from dekanat.utils.backend import EXTENSION_KEY
from dekanat_core.backend_client import BackendError, ENTITY_KINDS
from dekanat_core.session_gate import UserIdentity

ADMIN_EMAIL = 'admin@uni.ru'
USER_EMAIL = 'user@uni.ru'
PASSWORD = 'secret1'


class FakeStore:
    """Хранилище одной сущности с тем же интерфейсом, что и EntityStore"""

    def __init__(self, kind, records=()):
        self.kind = kind
        self.records = {r['id']: dict(r) for r in records}
        self.next_id = max(self.records, default=0) + 1
        self.errors = {}  # операция -> BackendError

    def _maybe_fail(self, operation):
        error = self.errors.get(operation)
        if error is not None:
            raise error

    def list(self):
        self._maybe_fail('list')
        return [dict(r) for r in self.records.values()]

    def get(self, entity_id):
        self._maybe_fail('get')
        if entity_id not in self.records:
            raise BackendError('Not found', 404)
        return dict(self.records[entity_id])

    def create(self, fields):
        self._maybe_fail('create')
        record = {**fields, 'id': self.next_id}
        self.records[self.next_id] = record
        self.next_id += 1
        return dict(record)

    def update(self, entity_id, fields):
        self._maybe_fail('update')
        if entity_id not in self.records:
            raise BackendError('Not found', 404)
        self.records[entity_id] = {**fields, 'id': entity_id}
        return dict(self.records[entity_id])

    def delete(self, entity_id):
        self._maybe_fail('delete')
        if entity_id not in self.records:
            raise BackendError('Not found', 404)
        del self.records[entity_id]


class FakeAuth:
    def __init__(self, backend):
        self.backend = backend
        self.logout_error = None

    def _email(self):
        token = self.backend.token or ''
        return token[len('token-'):] if token.startswith('token-') else None

    def login(self, email, password):
        user = self.backend.users.get(email)
        if user is None or user['password'] != password:
            raise BackendError('Bad credentials', 401)
        self.backend.token = f'token-{email}'
        return UserIdentity(email, frozenset(user['roles'])), self.backend.token

    def register(self, email, password):
        if email in self.backend.users:
            raise BackendError('Пользователь уже существует', 409)
        self.backend.users[email] = {'password': password, 'roles': ['REGISTERED']}
        return {'email': email}

    def logout(self):
        if self.logout_error is not None:
            raise self.logout_error

    def current_roles(self):
        user = self.backend.users.get(self._email())
        return frozenset(user['roles']) if user else frozenset()


class FakeAdmin:
    def __init__(self, backend):
        self.backend = backend
        self.error = None

    def list_users(self):
        return [{'email': email, 'roles': list(u['roles'])} for email, u in self.backend.users.items()]

    def list_roles(self):
        return ['ADMIN', 'EMPLOYEE', 'STUDENT']

    def add_role(self, email, role):
        if self.error is not None:
            raise self.error
        roles = self.backend.users[email]['roles']
        if role not in roles:
            roles.append(role)

    def remove_role(self, email, role):
        if self.error is not None:
            raise self.error
        roles = self.backend.users[email]['roles']
        if role in roles:
            roles.remove(role)


class FakeBackend:
    """Общее состояние бэкенда на весь тест; factory подставляется в приложение"""

    def __init__(self):
        self.token = None
        self.users = {
            ADMIN_EMAIL: {'password': PASSWORD, 'roles': ['ADMIN']},
            USER_EMAIL: {'password': PASSWORD, 'roles': ['STUDENT']},
        }
        self.institutes = FakeStore('institutes', [
            {'id': 1, 'name': 'Физфак', 'email': 'phys@uni.ru', 'phone': '+74950000001'},
            {'id': 2, 'name': 'Мехмат', 'email': 'mech@uni.ru', 'phone': '+74950000002'},
        ])
        self.kafedras = FakeStore('kafedras', [
            {'id': 1, 'name': 'Кафедра оптики', 'email': 'opt@uni.ru', 'phone': '+74950000011',
             'room': '101', 'instituteId': 1, 'credentialsNonExpired': True},
            {'id': 2, 'name': 'Кафедра алгебры', 'email': 'alg@uni.ru', 'phone': '+74950000012',
             'room': '202', 'instituteId': 2, 'credentialsNonExpired': True},
        ])
        self.students = FakeStore('students', [
            {'id': 1, 'person': {'surname': 'Иванов', 'name': 'Иван', 'patronymic': 'Иванович',
                                 'phone': '+79990000001'}, 'yearStarted': 2022, 'financialForm': 'BUDGET'},
            {'id': 2, 'person': {'surname': 'Петрова', 'name': 'Анна', 'patronymic': 'Сергеевна',
                                 'phone': '+79990000002'}, 'yearStarted': 2023, 'financialForm': 'CONTRACT'},
        ])
        self.employees = FakeStore('employees', [
            {'id': 1, 'person': {'surname': 'Сидоров', 'name': 'Петр', 'patronymic': 'Ильич',
                                 'phone': '+79990000003'}, 'jobTitleId': 1, 'kafedraId': 2,
             'credentialsNonExpired': True},
        ])
        self.job_titles = FakeStore('job-titles', [
            {'id': 1, 'name': 'Доцент'},
            {'id': 2, 'name': 'Профессор'},
        ])
        self.auth = FakeAuth(self)
        self.admin = FakeAdmin(self)

    def factory(self, app, token=None, cookies=None):
        self.token = token
        return self

    def session_cookies(self):
        return {'JSESSIONID': 'abc'}

    def store(self, kind):
        if kind not in ENTITY_KINDS:
            raise KeyError(kind)
        return getattr(self, kind)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def app(backend):
    app = create_app({
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    })
    app.extensions[EXTENSION_KEY] = backend.factory
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email=ADMIN_EMAIL, password=PASSWORD, next_url=None):
    url = '/auth/login' if next_url is None else f'/auth/login?next={next_url}'
    return client.post(url, data={'email': email, 'password': password})


@pytest.fixture
def admin_client(client):
    login(client, ADMIN_EMAIL)
    return client


@pytest.fixture
def user_client(client):
    login(client, USER_EMAIL)
    return client


@pytest.fixture
def audit_actions(app):
    """Функция: список (action, status) из журнала в порядке записи"""
    def read():
        with app.app_context():
            return [(row.action, row.status) for row in AuditLog.query.order_by(AuditLog.id).all()]
    return read
