"""
Форма сотрудника
"""
from wtforms import BooleanField, SelectField, StringField, SubmitField

from dekanat.utils.forms import NOT_SELECTED, RuleSetForm
from dekanat_core.validation import EMPLOYEE_RULES


class EmployeeForm(RuleSetForm):
    """Форма для добавления и редактирования сотрудника"""
    rules = EMPLOYEE_RULES
    field_paths = {
        'surname': 'person.surname',
        'name': 'person.name',
        'patronymic': 'person.patronymic',
        'phone': 'person.phone',
        'job_title_id': 'jobTitleId',
        'kafedra_id': 'kafedraId',
        'credentials_non_expired': 'credentialsNonExpired',
    }

    surname = StringField('Фамилия')
    name = StringField('Имя')
    patronymic = StringField('Отчество')
    phone = StringField('Телефон', render_kw={'placeholder': '+79991234567'})
    job_title_id = SelectField('Должность', coerce=int, choices=[NOT_SELECTED], default=0)
    kafedra_id = SelectField('Кафедра', coerce=int, choices=[NOT_SELECTED], default=0)
    credentials_non_expired = BooleanField('Учетная запись активна', default=True)

    submit = SubmitField('Сохранить')
