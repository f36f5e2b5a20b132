"""
Конвейер табличного представления: поиск -> сортировка -> пагинация.

Один и тот же конвейер обслуживает таблицы институтов, кафедр, студентов и
сотрудников. Отличия сущностей описываются конфигурацией ListViewConfig
(карта полей, список полей для поиска, поле категории), сама обработка
общая и не хранит состояния.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

CATEGORY_ALL = 'ALL'
PAGE_SIZE_OPTIONS = (5, 10, 25)
DEFAULT_PAGE_SIZE = 10

FieldAccessor = Union[str, Callable[[Any], Any]]


class SortDirection(str, enum.Enum):
    ASC = 'asc'
    DESC = 'desc'

    @classmethod
    def parse(cls, raw: Optional[str]) -> 'SortDirection':
        if raw and raw.strip().lower() == cls.DESC.value:
            return cls.DESC
        return cls.ASC

    def flipped(self) -> 'SortDirection':
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


def resolve_field(record: Any, accessor: FieldAccessor) -> Any:
    """
    Достает значение поля из записи.

    accessor - либо путь через точку ('person.surname'), либо функция от записи.
    Отсутствующее звено пути дает None, а не исключение.
    """
    if callable(accessor):
        return accessor(record)

    value = record
    for part in accessor.split('.'):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def _script_rank(ch: str) -> int:
    if not ch.isalpha():
        return 0
    if 'а' <= ch <= 'я':
        return 1
    return 2


def collation_key(value: str) -> Tuple[Tuple[Tuple[int, str], ...], str]:
    """
    Ключ сравнения строк для русского алфавита.

    Регистр не учитывается, 'ё' стоит рядом с 'е'. Цифры и знаки идут первыми,
    кириллица раньше латиницы.
    """
    folded = value.casefold()
    chars = tuple((_script_rank(ch), ch) for ch in folded.replace('ё', 'е'))
    return chars, folded


def _sort_key(value: Any) -> Tuple[int, Any]:
    # Числа (и bool) идут перед строками, чтобы смешанные колонки не падали на сравнении
    if isinstance(value, (bool, int, float)):
        return 0, (float(value), '')
    return 1, collation_key(str(value))


@dataclass(frozen=True)
class ViewState:
    """Параметры отображения таблицы: поиск, фильтр, сортировка, страница"""

    search_text: str = ''
    category_filter: Optional[str] = None
    sort_field: Optional[str] = None
    sort_direction: SortDirection = SortDirection.ASC
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_args(cls, args: Mapping[str, Any], default_sort: Optional[str] = None) -> 'ViewState':
        """Собирает состояние из параметров запроса (?q=&category=&sort=&order=&page=&per_page=)"""
        page_index = _to_int(args.get('page'), 0)
        page_size = _to_int(args.get('per_page'), DEFAULT_PAGE_SIZE)
        if page_size not in PAGE_SIZE_OPTIONS:
            page_size = DEFAULT_PAGE_SIZE

        category = (args.get('category') or '').strip() or None

        return cls(
            search_text=(args.get('q') or '').strip(),
            category_filter=category,
            sort_field=(args.get('sort') or '').strip() or default_sort,
            sort_direction=SortDirection.parse(args.get('order')),
            page_index=max(page_index, 0),
            page_size=page_size,
        )

    def to_args(self) -> Dict[str, Any]:
        args: Dict[str, Any] = {
            'page': self.page_index,
            'per_page': self.page_size,
            'order': self.sort_direction.value,
        }
        if self.search_text:
            args['q'] = self.search_text
        if self.category_filter:
            args['category'] = self.category_filter
        if self.sort_field:
            args['sort'] = self.sort_field
        return args

    def with_search(self, text: str) -> 'ViewState':
        return replace(self, search_text=text, page_index=0)

    def with_category(self, category: Optional[str]) -> 'ViewState':
        return replace(self, category_filter=category, page_index=0)

    def with_page(self, page_index: int) -> 'ViewState':
        return replace(self, page_index=max(page_index, 0))

    def with_page_size(self, page_size: int) -> 'ViewState':
        return replace(self, page_size=page_size, page_index=0)

    def clamped(self, filtered_total: int) -> 'ViewState':
        """
        Возвращает состояние, у которого страница не выходит за конец выборки.

        Нужен после удаления или сужения фильтра: пустая страница не должна
        показываться, если на предыдущих страницах есть строки.
        """
        last_page = max(page_count(filtered_total, self.page_size) - 1, 0)
        if self.page_index > last_page:
            return replace(self, page_index=last_page)
        return self

    @property
    def category_active(self) -> bool:
        return bool(self.category_filter) and self.category_filter != CATEGORY_ALL


def _to_int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def page_count(total: int, page_size: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


@dataclass(frozen=True)
class PageResult:
    rows: List[Any]
    filtered_total: int
    page_index: int
    page_size: int

    @property
    def page_count(self) -> int:
        return page_count(self.filtered_total, self.page_size)

    @property
    def is_stale(self) -> bool:
        """Страница пуста, хотя в выборке есть строки (устаревший номер страницы)"""
        return not self.rows and self.filtered_total > 0


@dataclass(frozen=True)
class ListViewConfig:
    """
    Описание таблицы одной сущности.

    fields: ключ колонки -> путь к значению или функция
    searchable: ключи колонок, по которым работает текстовый поиск
    category_field: ключ колонки для фильтра-категории (например, форма обучения)
    """

    fields: Mapping[str, FieldAccessor]
    searchable: Sequence[str]
    default_sort: str
    category_field: Optional[str] = None

    def __post_init__(self):
        unknown = [key for key in self.searchable if key not in self.fields]
        if self.category_field and self.category_field not in self.fields:
            unknown.append(self.category_field)
        if self.default_sort not in self.fields:
            unknown.append(self.default_sort)
        if unknown:
            raise ValueError(f'Unknown list view fields: {", ".join(unknown)}')


class ListViewPipeline:
    """Чистое преобразование (записи, ViewState) -> PageResult"""

    def __init__(self, config: ListViewConfig):
        self.config = config

    def default_state(self, **overrides) -> ViewState:
        return ViewState(**{'sort_field': self.config.default_sort, **overrides})

    def state_from_args(self, args: Mapping[str, Any]) -> ViewState:
        state = ViewState.from_args(args, default_sort=self.config.default_sort)
        if state.sort_field not in self.config.fields:
            state = replace(state, sort_field=self.config.default_sort)
        return state

    def filter(self, records: Iterable[Any], state: ViewState) -> List[Any]:
        needle = state.search_text.lower()
        accessors = [self.config.fields[key] for key in self.config.searchable]
        check_category = state.category_active and self.config.category_field is not None
        category_accessor = self.config.fields.get(self.config.category_field) if check_category else None

        result = []
        for record in records:
            if check_category and resolve_field(record, category_accessor) != state.category_filter:
                continue
            if needle and not any(
                needle in str(value).lower()
                for value in (resolve_field(record, accessor) for accessor in accessors)
                if value is not None
            ):
                continue
            result.append(record)
        return result

    def sort(self, records: Sequence[Any], state: ViewState) -> List[Any]:
        accessor = self.config.fields.get(state.sort_field) if state.sort_field else None
        if accessor is None:
            return list(records)

        present = []
        missing = []
        for record in records:
            value = resolve_field(record, accessor)
            if value is None or value == '':
                missing.append(record)
            else:
                present.append((_sort_key(value), record))

        # sorted() стабилен и при reverse=True: равные ключи сохраняют исходный порядок
        ordered = sorted(present, key=lambda item: item[0], reverse=state.sort_direction is SortDirection.DESC)
        return [record for _, record in ordered] + missing

    @staticmethod
    def paginate(records: Sequence[Any], state: ViewState) -> List[Any]:
        start = state.page_index * state.page_size
        if start >= len(records):
            return []
        return list(records[start:start + state.page_size])

    def run(self, records: Iterable[Any], state: ViewState) -> PageResult:
        filtered = self.filter(records, state)
        ordered = self.sort(filtered, state)
        return PageResult(
            rows=self.paginate(ordered, state),
            filtered_total=len(filtered),
            page_index=state.page_index,
            page_size=state.page_size,
        )

    def toggle_sort(self, state: ViewState, sort_field: str) -> ViewState:
        """Повторный клик по активной колонке меняет направление, новая колонка - всегда по возрастанию"""
        if sort_field not in self.config.fields:
            return state
        if sort_field == state.sort_field:
            return replace(state, sort_direction=state.sort_direction.flipped(), page_index=0)
        return replace(state, sort_field=sort_field, sort_direction=SortDirection.ASC, page_index=0)
