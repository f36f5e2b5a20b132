"""
Решение о доступе к разделам консоли по текущей сессии.

Модуль ничего не знает о Flask: на вход получает Session, на выход отдает
AccessDecision. Привязка к запросам живет в dekanat.auth.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

ROLE_ADMIN = 'ADMIN'

DENY_ANONYMOUS = 'anonymous'
DENY_MISSING_ROLE = 'missing_role'


@dataclass(frozen=True)
class UserIdentity:
    email: str
    roles: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        # Роли могли прийти списком из JSON-сессии
        object.__setattr__(self, 'roles', frozenset(self.roles))

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def to_dict(self) -> dict:
        return {'email': self.email, 'roles': sorted(self.roles)}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional['UserIdentity']:
        if not data or not data.get('email'):
            return None
        return cls(email=data['email'], roles=frozenset(data.get('roles') or ()))


@dataclass(frozen=True)
class Session:
    identity: Optional[UserIdentity] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def roles(self) -> frozenset:
        return self.identity.roles if self.identity else frozenset()


ANONYMOUS = Session()


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def allow(cls) -> 'AccessDecision':
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> 'AccessDecision':
        return cls(False, reason)


def authorize(session: Session, required_roles: Optional[Iterable[str]] = None) -> AccessDecision:
    """
    Пустой набор ролей - публичный раздел, пускаем всех (в том числе анонимов).
    Иначе нужна авторизация и хотя бы одна роль из набора.
    """
    required = frozenset(required_roles or ())
    if not required:
        return AccessDecision.allow()

    if session.identity is None:
        return AccessDecision.deny(DENY_ANONYMOUS)

    if not any(session.identity.has_role(role) for role in required):
        return AccessDecision.deny(DENY_MISSING_ROLE)

    return AccessDecision.allow()
