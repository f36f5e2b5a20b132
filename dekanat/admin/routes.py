"""
Админ-панель: таблица пользователей с ролями, выдача/снятие ролей, журнал действий
"""
import logging

from flask import flash, redirect, render_template, url_for

from dekanat.admin import admin_bp
from dekanat.admin.forms import RoleChangeForm
from dekanat.auth.permissions import ADMIN_PANEL, role_label, roles_for
from dekanat.auth.rbac_utils import require_access, safe_next_url
from dekanat.auth.session_store import session_store
from dekanat.utils.backend import get_backend
from dekanat.utils.crud import Column, EntityPage, TableData, render_list_page
from dekanat_core.audit_logger import audit_logger
from dekanat_core.backend_client import BackendError
from dekanat_core.list_view import ListViewConfig, ListViewPipeline
from dekanat_core.session_gate import authorize

logger = logging.getLogger(__name__)

PAGE = EntityPage(
    kind='users',
    entity='User',
    endpoint_prefix='admin.user',
    title='Пользователи',
    singular='пользователя',
    empty_message='Пользователи не найдены',
)

USER_TABLE = ListViewConfig(
    fields={
        'email': 'email',
        'roles': lambda u: ', '.join(sorted(u.get('roles') or [])),
    },
    searchable=['email', 'roles'],
    default_sort='email',
)

COLUMNS = [
    Column('email', 'E-mail'),
    Column('roles', 'Роли', display=lambda u: ', '.join(role_label(r) for r in sorted(u.get('roles') or []))),
]

pipeline = ListViewPipeline(USER_TABLE)

AUDIT_LIMIT = 100


def _load_users():
    return TableData(records=get_backend().admin.list_users())


def _role_choices(roles):
    return [(role, role_label(role)) for role in roles]


@admin_bp.route('/')
@require_access(ADMIN_PANEL)
def admin_panel():
    """Таблица пользователей"""
    roles = []
    try:
        roles = get_backend().admin.list_roles()
    except BackendError as e:
        logger.error(f"Failed to load roles: {e.message}")

    role_form = RoleChangeForm(formdata=None)
    role_form.role.choices = _role_choices(roles)
    return render_list_page(PAGE, pipeline, COLUMNS, _load_users, template='admin/users.html',
                            search_label='Поиск (e-mail, роль)', role_form=role_form)


def _change_role(action):
    backend = get_backend()
    form = RoleChangeForm()
    return_to = safe_next_url(form.next.data) or url_for('admin.admin_panel')

    try:
        form.role.choices = _role_choices(backend.admin.list_roles())
    except BackendError as e:
        logger.error(f"Failed to load roles: {e.message}")
        flash(e.message or 'Не удалось загрузить список ролей', 'danger')
        return redirect(return_to)

    if not form.validate_on_submit():
        flash('Выберите роль.', 'warning')
        return redirect(return_to)

    email = form.email.data.strip()
    role = form.role.data
    try:
        if action == 'add_role':
            backend.admin.add_role(email, role)
        else:
            backend.admin.remove_role(email, role)
    except BackendError as e:
        logger.warning(f"Backend rejected {action} {role} for {email}: {e.message}")
        audit_logger.log_error(action=action, entity='User', error=e.message,
                               metadata={'email': email, 'role': role})
        flash(e.message or 'Не удалось изменить роли', 'danger')
        return redirect(return_to)

    audit_logger.log(action=action, entity='User', metadata={'email': email, 'role': role})
    if action == 'add_role':
        flash(f'Роль «{role_label(role)}» выдана пользователю {email}.', 'success')
    else:
        flash(f'Роль «{role_label(role)}» снята с пользователя {email}.', 'success')

    current = session_store.current()
    if current.identity is not None and current.identity.email == email:
        # Меняли свои роли: перечитываем их с бэкенда, меню и доступы обновятся сразу
        try:
            session_store.update_roles(backend.auth.current_roles())
        except BackendError as e:
            logger.warning(f"Failed to refresh own roles for {email}: {e.message}")
        if not authorize(session_store.current(), roles_for(ADMIN_PANEL)):
            return redirect(url_for('main.index'))

    return redirect(return_to)


@admin_bp.route('/roles/add', methods=['POST'])
@require_access(ADMIN_PANEL)
def add_role():
    return _change_role('add_role')


@admin_bp.route('/roles/remove', methods=['POST'])
@require_access(ADMIN_PANEL)
def remove_role():
    return _change_role('remove_role')


@admin_bp.route('/audit')
@require_access(ADMIN_PANEL)
def audit_log():
    """Последние записи журнала действий"""
    entries = audit_logger.recent(limit=AUDIT_LIMIT)
    return render_template('admin/audit.html', entries=entries, limit=AUDIT_LIMIT)
