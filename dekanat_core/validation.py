"""
Декларативные правила проверки форм.

Правила описываются один раз на сущность (RuleSet) и одинаково применяются
при создании и при редактировании. Ключи правил - пути в payload, который
уходит на бэкенд ('name', 'person.surname', 'yearStarted').
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from dekanat_core.list_view import resolve_field

PHONE_RE = re.compile(r'^\+\d{5,15}$')
EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_YEAR_STARTED = 2000


def _normalize(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass
class ValidationContext:
    """Уже загруженный список записей и id редактируемой записи (None при создании)"""

    existing: Sequence[Mapping[str, Any]] = ()
    current_id: Optional[int] = None

    def others(self) -> Iterable[Mapping[str, Any]]:
        for record in self.existing:
            if self.current_id is not None and record.get('id') == self.current_id:
                continue
            yield record


class Rule:
    message = 'Неверное значение'

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message

    def check(self, value: Any, data: Mapping[str, Any], context: ValidationContext) -> Optional[str]:
        raise NotImplementedError


class Required(Rule):
    message = 'Поле обязательно'

    def check(self, value, data, context):
        if _is_blank(value):
            return self.message
        return None


class PositiveId(Rule):
    """Выбор из справочника: 0/None означает 'не выбрано'"""

    message = 'Значение обязательно'

    def check(self, value, data, context):
        try:
            if int(value) > 0:
                return None
        except (TypeError, ValueError):
            pass
        return self.message


class Matches(Rule):
    def __init__(self, pattern: re.Pattern, message: str):
        super().__init__(message)
        self.pattern = pattern

    def check(self, value, data, context):
        if _is_blank(value):
            return None
        if not self.pattern.match(str(value).strip()):
            return self.message
        return None


class YearRange(Rule):
    message = None

    def __init__(self, minimum: int = MIN_YEAR_STARTED, maximum: Optional[Callable[[], int]] = None,
                 message: Optional[str] = None):
        super().__init__(message)
        self.minimum = minimum
        self.maximum = maximum or (lambda: date.today().year)

    def check(self, value, data, context):
        if isinstance(value, bool) or not isinstance(value, int):
            return 'Неверный год'
        upper = self.maximum()
        if value < self.minimum or value > upper:
            return self.message or f'Год между {self.minimum} и {upper}'
        return None


class Unique(Rule):
    """
    Уникальность относительно уже загруженного списка.

    keys - пути полей, совпадение по всем считается дублем (строки
    сравниваются без учета регистра и пробелов по краям).
    message может содержать плейсхолдеры {путь} из проверяемых данных.
    """

    def __init__(self, keys: Sequence[str], message: str):
        super().__init__(message)
        self.keys = tuple(keys)

    def _signature(self, record: Mapping[str, Any]) -> Tuple[Any, ...]:
        return tuple(_normalize(resolve_field(record, key)) for key in self.keys)

    def check(self, value, data, context):
        signature = self._signature(data)
        if any(_is_blank(part) for part in signature):
            return None
        for record in context.others():
            if self._signature(record) == signature:
                values = {key.replace('.', '_'): resolve_field(data, key) for key in self.keys}
                return self.message.format(**values)
        return None


@dataclass
class RuleSet:
    rules: Dict[str, List[Rule]] = field(default_factory=dict)

    def validate(self, data: Mapping[str, Any], context: Optional[ValidationContext] = None) -> Dict[str, str]:
        """Возвращает {путь: сообщение}; для каждого поля - первое сработавшее правило"""
        context = context or ValidationContext()
        errors: Dict[str, str] = {}
        for path, rules in self.rules.items():
            value = resolve_field(data, path)
            for rule in rules:
                message = rule.check(value, data, context)
                if message:
                    errors[path] = message
                    break
        return errors


PHONE_RULES = [Required('Телефон обязателен'), Matches(PHONE_RE, 'Формат: + и 5–15 цифр')]
EMAIL_RULES = [Required('E-mail обязателен'), Matches(EMAIL_RE, 'Неверный формат e-mail')]

PERSON_RULES = {
    'person.surname': [Required('Фамилия обязательна')],
    'person.name': [Required('Имя обязательно')],
    'person.patronymic': [Required('Отчество обязательно')],
    'person.phone': PHONE_RULES,
}

INSTITUTE_RULES = RuleSet({
    'name': [
        Required('Название обязательно'),
        Unique(['name'], 'Институт «{name}» уже существует'),
    ],
    'email': EMAIL_RULES,
    'phone': PHONE_RULES,
})

KAFEDRA_RULES = RuleSet({
    'name': [
        Required('Название обязательно'),
        Unique(['name', 'instituteId'], 'Кафедра «{name}» в этом институте уже есть'),
    ],
    'email': EMAIL_RULES,
    'phone': PHONE_RULES,
    'room': [Required('Кабинет обязателен')],
    'instituteId': [PositiveId('Институт обязателен')],
})

STUDENT_RULES = RuleSet({
    **PERSON_RULES,
    'yearStarted': [
        YearRange(),
        Unique(
            ['person.surname', 'person.name', 'person.patronymic', 'yearStarted'],
            'Студент {person_surname} {person_name} уже зарегистрирован за {yearStarted}',
        ),
    ],
    'financialForm': [Required('Форма обучения обязательна')],
})

EMPLOYEE_RULES = RuleSet({
    **PERSON_RULES,
    'jobTitleId': [PositiveId('Должность обязательна')],
    'kafedraId': [
        PositiveId('Кафедра обязательна'),
        Unique(
            ['person.surname', 'person.name', 'person.patronymic', 'kafedraId'],
            'Сотрудник {person_surname} {person_name} уже работает на этой кафедре',
        ),
    ],
})
