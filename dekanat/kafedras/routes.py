"""
Маршруты для управления кафедрами
"""
from dekanat.auth.permissions import ENTITIES_MANAGE, LISTS_VIEW
from dekanat.auth.rbac_utils import require_access
from dekanat.kafedras import kafedras_bp
from dekanat.kafedras.forms import KafedraForm
from dekanat.utils.backend import get_backend
from dekanat.utils.forms import lookup_choices
from dekanat.utils.crud import Column, EntityPage, TableData, handle_delete, render_form_page, render_list_page
from dekanat_core.list_view import CATEGORY_ALL, ListViewConfig, ListViewPipeline

PAGE = EntityPage(
    kind='kafedras',
    entity='Kafedra',
    endpoint_prefix='kafedras.kafedra',
    title='Кафедры',
    singular='кафедру',
    empty_message='Кафедры не найдены',
)

KAFEDRA_TABLE = ListViewConfig(
    fields={
        'name': 'name',
        'email': 'email',
        'phone': 'phone',
        'room': 'room',
        'instituteName': 'instituteName',
        # Фильтр приходит строкой из query string
        'institute': lambda k: str(k.get('instituteId')),
    },
    searchable=['name', 'email', 'room', 'phone'],
    default_sort='name',
    category_field='institute',
)

COLUMNS = [
    Column('name', 'Название'),
    Column('email', 'E-mail'),
    Column('phone', 'Телефон'),
    Column('room', 'Кабинет'),
    Column('instituteName', 'Институт'),
]

pipeline = ListViewPipeline(KAFEDRA_TABLE)


def _load_kafedras():
    backend = get_backend()
    kafedras = backend.kafedras.list()
    institutes = backend.institutes.list()
    names = {i.get('id'): i.get('name') for i in institutes}

    records = [{**k, 'instituteName': names.get(k.get('instituteId'), '')} for k in kafedras]
    options = [(CATEGORY_ALL, 'Все')] + [(str(i['id']), i.get('name') or '') for i in institutes]
    return TableData(records=records, category_options=options)


def _prepare_form(form):
    form.institute_id.choices = lookup_choices(get_backend().institutes.list())


@kafedras_bp.route('/')
@require_access(LISTS_VIEW)
def kafedra_list():
    """Список кафедр с фильтром по институту"""
    return render_list_page(PAGE, pipeline, COLUMNS, _load_kafedras, category_label='Институт',
                            search_label='Поиск (название, e-mail, кабинет, телефон)')


@kafedras_bp.route('/create', methods=['GET', 'POST'])
@require_access(ENTITIES_MANAGE)
def kafedra_create():
    return render_form_page(PAGE, KafedraForm, prepare_form=_prepare_form)


@kafedras_bp.route('/<int:entity_id>', methods=['GET', 'POST'])
@require_access(ENTITIES_MANAGE)
def kafedra_edit(entity_id):
    return render_form_page(PAGE, KafedraForm, entity_id, prepare_form=_prepare_form)


@kafedras_bp.route('/<int:entity_id>/delete', methods=['POST'])
@require_access(ENTITIES_MANAGE)
def kafedra_delete(entity_id):
    return handle_delete(PAGE, entity_id)
