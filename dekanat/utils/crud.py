"""
Общие обработчики страниц сущностей: таблица, форма создания/редактирования, удаление.

Все четыре сущности (институты, кафедры, студенты, сотрудники) ведут себя
одинаково: загрузить список с бэкенда -> прогнать через ListViewPipeline ->
показать страницу; форма проверяется правилами и отправляется на бэкенд,
после успеха - редирект на таблицу, которая перечитает данные.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from flask import abort, flash, redirect, render_template, request, url_for

from dekanat.auth.permissions import ENTITIES_MANAGE
from dekanat.auth.rbac_utils import can_access, safe_next_url
from dekanat.utils.backend import get_backend
from dekanat.utils.forms import DeleteForm
from dekanat_core.audit_logger import audit_logger
from dekanat_core.backend_client import BackendError
from dekanat_core.list_view import PAGE_SIZE_OPTIONS, resolve_field
from dekanat_core.validation import ValidationContext

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = 'Не удалось сохранить изменения'
DELETE_FAILED_MESSAGE = 'Не удалось удалить запись'
LOAD_FAILED_MESSAGE = 'Не удалось загрузить данные'


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    display: Optional[Callable[[Any], Any]] = None

    def render(self, row, config):
        if self.display is not None:
            return self.display(row)
        value = resolve_field(row, config.fields[self.key])
        return '' if value is None else value


@dataclass(frozen=True)
class EntityPage:
    """Описание страниц одной сущности"""

    kind: str                      # ключ хранилища на бэкенде ('students')
    entity: str                    # имя для журнала ('Student')
    endpoint_prefix: str           # 'students.student'
    title: str
    singular: str                  # 'студента'
    empty_message: str

    @property
    def list_endpoint(self):
        return f'{self.endpoint_prefix}_list'

    @property
    def create_endpoint(self):
        return f'{self.endpoint_prefix}_create'

    @property
    def edit_endpoint(self):
        return f'{self.endpoint_prefix}_edit'

    @property
    def delete_endpoint(self):
        return f'{self.endpoint_prefix}_delete'


@dataclass
class TableData:
    """Записи для таблицы и варианты фильтра-категории, загруженные вместе с ними"""

    records: List[Any]
    category_options: List[Tuple[str, str]] = field(default_factory=list)


def render_list_page(page, pipeline, columns, load_records, category_label=None, search_label='Поиск',
                     template='entity_list.html', **extra_context):
    """
    Таблица сущности.

    load_records() возвращает TableData; записи со справочными колонками
    (название кафедры и т.п.) загрузчик дополняет сам, не меняя исходные словари.
    """
    state = pipeline.state_from_args(request.args)

    toggle = request.args.get('toggle')
    if toggle:
        return redirect(url_for(request.endpoint, **pipeline.toggle_sort(state, toggle).to_args()))

    load_error = None
    data = TableData(records=[])
    try:
        data = load_records()
    except BackendError as e:
        logger.error(f"Failed to load {page.kind}: {e.message}")
        load_error = e.message or LOAD_FAILED_MESSAGE

    result = pipeline.run(data.records, state)
    if result.is_stale:
        # Страница ушла за конец выборки (удалили последнюю строку) - на последнюю непустую
        return redirect(url_for(request.endpoint, **state.clamped(result.filtered_total).to_args()))

    return render_template(
        template,
        page=page,
        config=pipeline.config,
        columns=columns,
        result=result,
        state=state,
        load_error=load_error,
        category_options=data.category_options,
        category_label=category_label,
        search_label=search_label,
        page_size_options=PAGE_SIZE_OPTIONS,
        can_manage=can_access(ENTITIES_MANAGE),
        **extra_context,
    )


def _load_existing(store):
    try:
        return store.list()
    except BackendError as e:
        logger.warning(f"Uniqueness check skipped, list unavailable: {e.message}")
        return []


def render_form_page(page, form_class, entity_id=None, prepare_form=None):
    """
    Создание (entity_id=None) или редактирование записи.

    prepare_form(form) заполняет варианты выбора (справочники) и может
    бросить BackendError.
    """
    backend = get_backend()
    store = backend.store(page.kind)
    server_error = None
    record = None
    return_to = safe_next_url(request.args.get('next'))

    if entity_id is not None:
        try:
            record = store.get(entity_id)
        except BackendError as e:
            if e.is_not_found:
                abort(404)
            logger.error(f"Failed to load {page.kind}/{entity_id}: {e.message}")
            return render_template('entity_form.html', page=page, form=None, record=None,
                                   entity_id=entity_id, load_error=e.message or LOAD_FAILED_MESSAGE,
                                   server_error=None, delete_form=None)

    context = ValidationContext(existing=_load_existing(store) if request.method == 'POST' else (),
                                current_id=entity_id)
    if request.method == 'POST':
        form = form_class(context=context)
    else:
        form = form_class(data=form_class.data_from_record(record) if record else None, context=context)

    load_error = None
    if prepare_form is not None:
        try:
            prepare_form(form)
        except BackendError as e:
            logger.error(f"Failed to load lookups for {page.kind}: {e.message}")
            load_error = e.message or LOAD_FAILED_MESSAGE

    if load_error is None and form.validate_on_submit():
        payload = form.to_payload()
        action = 'update' if entity_id is not None else 'create'
        try:
            if entity_id is not None:
                saved = store.update(entity_id, payload)
            else:
                saved = store.create(payload)
        except BackendError as e:
            logger.warning(f"Backend rejected {action} of {page.kind}: {e.message}")
            server_error = e.message or SAVE_FAILED_MESSAGE
            audit_logger.log_error(
                action=f'{action}_{page.entity.lower()}',
                entity=page.entity,
                entity_id=entity_id,
                error=server_error,
            )
        else:
            saved_id = saved.get('id') if isinstance(saved, dict) else None
            audit_logger.log(
                action=f'{action}_{page.entity.lower()}',
                entity=page.entity,
                entity_id=saved_id or entity_id,
                metadata={'payload': payload},
            )
            flash('Изменения сохранены.' if entity_id is not None else 'Запись создана.', 'success')
            return redirect(return_to or url_for(page.list_endpoint))

    delete_form = None
    if entity_id is not None:
        delete_form = DeleteForm(formdata=None)
        delete_form.next.data = return_to
    return render_template(
        'entity_form.html',
        page=page,
        form=form,
        record=record,
        entity_id=entity_id,
        load_error=load_error,
        server_error=server_error,
        delete_form=delete_form,
    )


def handle_delete(page, entity_id):
    form = DeleteForm()
    return_to = safe_next_url(form.next.data) or url_for(page.list_endpoint)

    if not form.validate_on_submit():
        flash('Запрос на удаление отклонен.', 'danger')
        return redirect(return_to)

    try:
        get_backend().store(page.kind).delete(entity_id)
    except BackendError as e:
        logger.warning(f"Backend rejected delete of {page.kind}/{entity_id}: {e.message}")
        audit_logger.log_error(action=f'delete_{page.entity.lower()}', entity=page.entity,
                               entity_id=entity_id, error=e.message)
        flash(e.message or DELETE_FAILED_MESSAGE, 'danger')
        return redirect(url_for(page.edit_endpoint, entity_id=entity_id))

    audit_logger.log(action=f'delete_{page.entity.lower()}', entity=page.entity, entity_id=entity_id)
    flash('Запись удалена.', 'success')
    # Если удалили единственную строку последней страницы, таблица сама перейдет на предыдущую
    return redirect(return_to)
