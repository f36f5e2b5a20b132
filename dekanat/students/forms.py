"""
Формы для управления студентами
"""
from datetime import date

from wtforms import IntegerField, SelectField, StringField, SubmitField

from dekanat.utils.forms import RuleSetForm
from dekanat_core.validation import STUDENT_RULES

FINANCIAL_FORMS = {
    'BUDGET': 'Бюджет',
    'CONTRACT': 'Контракт',
}

def financial_form_label(value):
    return FINANCIAL_FORMS.get(value, value or '')

class StudentForm(RuleSetForm):
    """Форма для создания и редактирования студента"""
    rules = STUDENT_RULES
    field_paths = {
        'surname': 'person.surname',
        'name': 'person.name',
        'patronymic': 'person.patronymic',
        'phone': 'person.phone',
        'year_started': 'yearStarted',
        'financial_form': 'financialForm',
    }

    surname = StringField('Фамилия')
    name = StringField('Имя')
    patronymic = StringField('Отчество')
    phone = StringField('Телефон', render_kw={'placeholder': '+79991234567'})
    year_started = IntegerField('Год поступления', default=lambda: date.today().year)
    financial_form = SelectField('Форма обучения', choices=list(FINANCIAL_FORMS.items()), default='BUDGET')

    submit = SubmitField('Сохранить')
