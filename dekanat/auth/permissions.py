"""
Реестр ролей и политика доступа к разделам консоли.
Одна таблица на все маршруты и пункты меню.
"""
from flask import current_app

from dekanat_core.session_gate import ROLE_ADMIN

# Подписи ролей для UI
ROLE_LABELS = {
    'ADMIN': 'Администратор',
    'STUDENT': 'Студент',
    'EMPLOYEE': 'Сотрудник',
    'TUTOR': 'Преподаватель',
    'REGISTERED': 'Зарегистрированный',
}

LISTS_VIEW = 'lists.view'
ENTITIES_MANAGE = 'entities.manage'
ADMIN_PANEL = 'admin.panel'

# Раздел -> роли, любой из которых открывает доступ. Пустой набор - публичный раздел
ACCESS_POLICY = {
    LISTS_VIEW: frozenset(),
    ENTITIES_MANAGE: frozenset({ROLE_ADMIN}),
    ADMIN_PANEL: frozenset({ROLE_ADMIN}),
}

# Пункты навигации: (endpoint, подпись, раздел)
NAV_ITEMS = [
    ('institutes.institute_list', 'Институты', LISTS_VIEW),
    ('kafedras.kafedra_list', 'Кафедры', LISTS_VIEW),
    ('students.student_list', 'Студенты', LISTS_VIEW),
    ('employees.employee_list', 'Сотрудники', LISTS_VIEW),
    ('admin.admin_panel', 'Админ-панель', ADMIN_PANEL),
]


def roles_for(section):
    """Роли для раздела с учетом настройки DEKANAT_PUBLIC_LISTS"""
    if section == LISTS_VIEW and not current_app.config.get('DEKANAT_PUBLIC_LISTS', True):
        return frozenset({ROLE_ADMIN})
    return ACCESS_POLICY[section]


def role_label(role):
    return ROLE_LABELS.get(role, role)
