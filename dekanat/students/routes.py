"""
Маршруты для управления студентами
"""
from dekanat.auth.permissions import ENTITIES_MANAGE, LISTS_VIEW
from dekanat.auth.rbac_utils import require_access
from dekanat.students import students_bp
from dekanat.students.forms import FINANCIAL_FORMS, StudentForm, financial_form_label
from dekanat.utils.backend import get_backend
from dekanat.utils.crud import Column, EntityPage, TableData, handle_delete, render_form_page, render_list_page
from dekanat_core.list_view import CATEGORY_ALL, ListViewConfig, ListViewPipeline

PAGE = EntityPage(
    kind='students',
    entity='Student',
    endpoint_prefix='students.student',
    title='Список студентов',
    singular='студента',
    empty_message='Студенты не найдены',
)

STUDENT_TABLE = ListViewConfig(
    fields={
        'surname': 'person.surname',
        'name': 'person.name',
        'patronymic': 'person.patronymic',
        'phone': 'person.phone',
        'yearStarted': 'yearStarted',
        'financialForm': 'financialForm',
    },
    searchable=['surname', 'name', 'patronymic'],
    default_sort='surname',
    category_field='financialForm',
)

COLUMNS = [
    Column('surname', 'Фамилия'),
    Column('name', 'Имя'),
    Column('patronymic', 'Отчество'),
    Column('phone', 'Телефон'),
    Column('yearStarted', 'Год поступления'),
    Column('financialForm', 'Форма обучения', display=lambda s: financial_form_label(s.get('financialForm'))),
]

CATEGORY_OPTIONS = [(CATEGORY_ALL, 'Все')] + list(FINANCIAL_FORMS.items())

pipeline = ListViewPipeline(STUDENT_TABLE)


def _load_students():
    return TableData(records=get_backend().students.list(), category_options=CATEGORY_OPTIONS)


@students_bp.route('/')
@require_access(LISTS_VIEW)
def student_list():
    """Список студентов с поиском по ФИО и фильтром по форме обучения"""
    return render_list_page(PAGE, pipeline, COLUMNS, _load_students, category_label='Форма обучения',
                            search_label='Поиск (ФИО)')


@students_bp.route('/create', methods=['GET', 'POST'])
@require_access(ENTITIES_MANAGE)
def student_create():
    return render_form_page(PAGE, StudentForm)


@students_bp.route('/<int:entity_id>', methods=['GET', 'POST'])
@require_access(ENTITIES_MANAGE)
def student_edit(entity_id):
    return render_form_page(PAGE, StudentForm, entity_id)


@students_bp.route('/<int:entity_id>/delete', methods=['POST'])
@require_access(ENTITIES_MANAGE)
def student_delete(entity_id):
    return handle_delete(PAGE, entity_id)
