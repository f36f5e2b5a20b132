"""
Базовая форма: WTForms-поля + общие правила из dekanat_core.validation
"""
from flask_wtf import FlaskForm
from wtforms import HiddenField, SubmitField

from dekanat_core.list_view import resolve_field
from dekanat_core.validation import RuleSet, ValidationContext


def set_path(target, path, value):
    """Кладет значение во вложенный словарь по пути 'person.surname'"""
    parts = path.split('.')
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


class RuleSetForm(FlaskForm):
    """
    Форма сущности. field_paths связывает поле формы с путем в payload бэкенда,
    rules проверяются после стандартных валидаторов WTForms.
    """

    rules = RuleSet()
    field_paths = {}

    def __init__(self, *args, context=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.context = context or ValidationContext()

    @classmethod
    def data_from_record(cls, record):
        return {name: resolve_field(record, path) for name, path in cls.field_paths.items()}

    def _field_value(self, name):
        value = self[name].data
        if isinstance(value, str):
            return value.strip()
        return value

    def to_payload(self):
        payload = {}
        for name, path in self.field_paths.items():
            set_path(payload, path, self._field_value(name))
        return payload

    def validate(self, extra_validators=None):
        ok = super().validate(extra_validators)
        rule_errors = self.rules.validate(self.to_payload(), self.context)
        for name, path in self.field_paths.items():
            message = rule_errors.get(path)
            field = self[name]
            # Ошибку WTForms (например, не число) не дублируем сообщением правила
            if message and not field.errors:
                field.errors = list(field.errors) + [message]
        return ok and not rule_errors


class DeleteForm(FlaskForm):
    """Подтверждение удаления (нужна только ради CSRF) + адрес возврата к списку"""
    next = HiddenField()
    submit = SubmitField('Удалить')


NOT_SELECTED = (0, '— выберите —')


def lookup_choices(items):
    """Варианты выбора из справочника {id, name}, по алфавиту"""
    choices = [(int(item['id']), item.get('name') or f"#{item['id']}") for item in items if item.get('id') is not None]
    return [NOT_SELECTED] + sorted(choices, key=lambda c: c[1].casefold())
