from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from dekanat_core.session_gate import UserIdentity

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://localhost:8080/api/v1/'

ENTITY_KINDS = ('institutes', 'kafedras', 'students', 'employees')


class BackendError(Exception):
    """Ошибка обращения к REST-бэкенду. message показывается пользователю как есть"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def extract_error_message(response: requests.Response) -> str:
    """Поле message из JSON, иначе текст ответа, иначе HTTP-статус"""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = payload.get('message') or payload.get('error')
        if message:
            return str(message)
    elif isinstance(payload, str) and payload.strip():
        return payload.strip()

    text = (response.text or '').strip()
    if text:
        return text[:500]
    return f'HTTP {response.status_code}'


@dataclass
class BackendClient:
    base_url: str = DEFAULT_API_URL
    timeout_seconds: float = 15.0
    token: Optional[str] = None
    cookies: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.base_url.endswith('/'):
            self.base_url += '/'
        self.http = requests.Session()
        self.http.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })
        if self.cookies:
            self.http.cookies.update(self.cookies)

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {'Authorization': f'Bearer {self.token}'}
        return {}

    def request(self, method: str, path: str, payload: Any = None) -> Any:
        url = self.base_url + path.lstrip('/')
        logger.debug(f"Backend request: {method} {url}")
        try:
            r = self.http.request(method, url, json=payload, headers=self._headers(), timeout=self.timeout_seconds)
        except requests.RequestException as e:
            logger.warning(f"Backend unreachable: {method} {url}: {e}")
            raise BackendError(str(e)) from e

        if not r.ok:
            message = extract_error_message(r)
            logger.warning(f"Backend error {r.status_code} on {method} {url}: {message}")
            raise BackendError(message, r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError:
            return r.text

    def get(self, path: str) -> Any:
        return self.request('GET', path)

    def post(self, path: str, payload: Any = None) -> Any:
        return self.request('POST', path, payload if payload is not None else {})

    def put(self, path: str, payload: Any) -> Any:
        return self.request('PUT', path, payload)

    def delete(self, path: str) -> Any:
        return self.request('DELETE', path)

    def session_cookies(self) -> Dict[str, str]:
        """Куки бэкенда (JSESSIONID), которые надо сохранить в сессии консоли"""
        return self.http.cookies.get_dict()


class EntityStore:
    """CRUD одной сущности: {kind}/getAll, {kind}/{id}, {kind}/create"""

    def __init__(self, client: BackendClient, kind: str):
        self.client = client
        self.kind = kind

    def list(self) -> List[Dict[str, Any]]:
        return self.client.get(f'{self.kind}/getAll') or []

    def get(self, entity_id: int) -> Dict[str, Any]:
        return self.client.get(f'{self.kind}/{int(entity_id)}')

    def create(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        return self.client.post(f'{self.kind}/create', dict(fields))

    def update(self, entity_id: int, fields: Mapping[str, Any]) -> Dict[str, Any]:
        return self.client.put(f'{self.kind}/{int(entity_id)}', {**fields, 'id': int(entity_id)})

    def delete(self, entity_id: int) -> None:
        self.client.delete(f'{self.kind}/{int(entity_id)}')


class AuthClient:
    def __init__(self, client: BackendClient):
        self.client = client

    def login(self, email: str, password: str) -> Tuple[UserIdentity, Optional[str]]:
        data = self.client.post('auth/login', {'email': email, 'password': password}) or {}
        token = data.get('token') if isinstance(data, dict) else None
        if token:
            self.client.token = token
        user = data.get('user') if isinstance(data, dict) else None
        identity = UserIdentity(
            email=(user or {}).get('email') or email,
            roles=self.current_roles(),
        )
        return identity, token

    def register(self, email: str, password: str) -> Dict[str, Any]:
        return self.client.post('auth/register', {'email': email, 'password': password}) or {}

    def logout(self) -> None:
        self.client.post('auth/logout')

    def current_roles(self) -> frozenset:
        authorities = self.client.get('auth/me') or []
        roles = set()
        for item in authorities:
            if isinstance(item, dict):
                role = item.get('authority')
            else:
                role = item
            if role:
                roles.add(str(role))
        return frozenset(roles)


class AdminClient:
    def __init__(self, client: BackendClient):
        self.client = client

    def list_users(self) -> List[Dict[str, Any]]:
        users = self.client.get('auth/users') or []
        return [{'email': u.get('email'), 'roles': list(u.get('roles') or [])} for u in users]

    def list_roles(self) -> List[str]:
        return list(self.client.get('auth/roles') or [])

    def add_role(self, email: str, role: str) -> None:
        self.client.post('auth/add_role', {'email': email, 'role': role})

    def remove_role(self, email: str, role: str) -> None:
        self.client.post('auth/remove_role', {'email': email, 'role': role})


class Backend:
    """Все коллабораторы бэкенда поверх одного HTTP-клиента"""

    def __init__(self, client: BackendClient):
        self.client = client
        self.institutes = EntityStore(client, 'institutes')
        self.kafedras = EntityStore(client, 'kafedras')
        self.students = EntityStore(client, 'students')
        self.employees = EntityStore(client, 'employees')
        self.job_titles = EntityStore(client, 'job-titles')
        self.auth = AuthClient(client)
        self.admin = AdminClient(client)

    def session_cookies(self) -> Dict[str, str]:
        return self.client.session_cookies()

    def store(self, kind: str) -> EntityStore:
        if kind not in ENTITY_KINDS:
            raise KeyError(kind)
        return getattr(self, kind)
