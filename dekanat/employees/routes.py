"""
Маршруты для управления сотрудниками
"""
from dekanat.auth.permissions import ENTITIES_MANAGE, LISTS_VIEW
from dekanat.auth.rbac_utils import require_access
from dekanat.employees import employees_bp
from dekanat.employees.forms import EmployeeForm
from dekanat.utils.backend import get_backend
from dekanat.utils.crud import Column, EntityPage, TableData, handle_delete, render_form_page, render_list_page
from dekanat.utils.forms import lookup_choices
from dekanat_core.list_view import ListViewConfig, ListViewPipeline

PAGE = EntityPage(
    kind='employees',
    entity='Employee',
    endpoint_prefix='employees.employee',
    title='Сотрудники',
    singular='сотрудника',
    empty_message='Сотрудники не найдены',
)


def _fio(employee):
    person = employee.get('person') or {}
    parts = (person.get('surname'), person.get('name'), person.get('patronymic'))
    return ' '.join(p for p in parts if p)


EMPLOYEE_TABLE = ListViewConfig(
    fields={
        'surname': 'person.surname',
        'name': 'person.name',
        'patronymic': 'person.patronymic',
        'phone': 'person.phone',
        'fio': _fio,
        'jobTitleName': 'jobTitleName',
        'kafedraName': 'kafedraName',
        'credentialsNonExpired': 'credentialsNonExpired',
    },
    # ФИО целиком, чтобы находилось "Иванов Иван"
    searchable=['fio', 'surname', 'name', 'patronymic', 'phone', 'jobTitleName', 'kafedraName'],
    default_sort='surname',
)

COLUMNS = [
    Column('surname', 'Фамилия'),
    Column('name', 'Имя'),
    Column('patronymic', 'Отчество'),
    Column('phone', 'Телефон'),
    Column('jobTitleName', 'Должность'),
    Column('kafedraName', 'Кафедра'),
    Column('credentialsNonExpired', 'Уч. данные',
           display=lambda e: '✔' if e.get('credentialsNonExpired') else '—'),
]

pipeline = ListViewPipeline(EMPLOYEE_TABLE)


def _names(items):
    return {i.get('id'): i.get('name') or '' for i in items}


def _load_employees():
    backend = get_backend()
    employees = backend.employees.list()
    kafedras = _names(backend.kafedras.list())
    job_titles = _names(backend.job_titles.list())

    records = [
        {
            **e,
            'kafedraName': kafedras.get(e.get('kafedraId'), ''),
            'jobTitleName': job_titles.get(e.get('jobTitleId'), ''),
        }
        for e in employees
    ]
    return TableData(records=records)


def _prepare_form(form):
    backend = get_backend()
    form.job_title_id.choices = lookup_choices(backend.job_titles.list())
    form.kafedra_id.choices = lookup_choices(backend.kafedras.list())


@employees_bp.route('/')
@require_access(LISTS_VIEW)
def employee_list():
    """Список сотрудников с поиском по ФИО, телефону, должности и кафедре"""
    return render_list_page(PAGE, pipeline, COLUMNS, _load_employees,
                            search_label='Поиск (ФИО, телефон, должность, кафедра)')


@employees_bp.route('/new', methods=['GET', 'POST'])
@employees_bp.route('/create', methods=['GET', 'POST'])
@require_access(ENTITIES_MANAGE)
def employee_create():
    return render_form_page(PAGE, EmployeeForm, prepare_form=_prepare_form)


@employees_bp.route('/<int:entity_id>', methods=['GET', 'POST'])
@require_access(ENTITIES_MANAGE)
def employee_edit(entity_id):
    return render_form_page(PAGE, EmployeeForm, entity_id, prepare_form=_prepare_form)


@employees_bp.route('/<int:entity_id>/delete', methods=['POST'])
@require_access(ENTITIES_MANAGE)
def employee_delete(entity_id):
    return handle_delete(PAGE, entity_id)
