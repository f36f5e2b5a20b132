"""
Маршруты для управления институтами
"""
from dekanat.auth.permissions import ENTITIES_MANAGE, LISTS_VIEW
from dekanat.auth.rbac_utils import require_access
from dekanat.institutes import institutes_bp
from dekanat.institutes.forms import InstituteForm
from dekanat.utils.backend import get_backend
from dekanat.utils.crud import Column, EntityPage, TableData, handle_delete, render_form_page, render_list_page
from dekanat_core.list_view import ListViewConfig, ListViewPipeline

PAGE = EntityPage(
    kind='institutes',
    entity='Institute',
    endpoint_prefix='institutes.institute',
    title='Институты',
    singular='институт',
    empty_message='Институты не найдены',
)

INSTITUTE_TABLE = ListViewConfig(
    fields={'name': 'name', 'email': 'email', 'phone': 'phone'},
    searchable=['name', 'email', 'phone'],
    default_sort='name',
)

COLUMNS = [
    Column('name', 'Название'),
    Column('email', 'E-mail'),
    Column('phone', 'Телефон'),
]

pipeline = ListViewPipeline(INSTITUTE_TABLE)


def _load_institutes():
    return TableData(records=get_backend().institutes.list())


@institutes_bp.route('/')
@require_access(LISTS_VIEW)
def institute_list():
    """Список институтов с поиском, сортировкой и пагинацией"""
    return render_list_page(PAGE, pipeline, COLUMNS, _load_institutes, search_label='Поиск (название, e-mail, телефон)')


@institutes_bp.route('/create', methods=['GET', 'POST'])
@require_access(ENTITIES_MANAGE)
def institute_create():
    return render_form_page(PAGE, InstituteForm)


@institutes_bp.route('/<int:entity_id>', methods=['GET', 'POST'])
@require_access(ENTITIES_MANAGE)
def institute_edit(entity_id):
    return render_form_page(PAGE, InstituteForm, entity_id)


@institutes_bp.route('/<int:entity_id>/delete', methods=['POST'])
@require_access(ENTITIES_MANAGE)
def institute_delete(entity_id):
    return handle_delete(PAGE, entity_id)
