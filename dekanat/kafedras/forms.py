"""
Форма кафедры
"""
from wtforms import BooleanField, EmailField, SelectField, StringField, SubmitField

from dekanat.utils.forms import NOT_SELECTED, RuleSetForm
from dekanat_core.validation import KAFEDRA_RULES


class KafedraForm(RuleSetForm):
    """Форма для создания и редактирования кафедры"""
    rules = KAFEDRA_RULES
    field_paths = {
        'name': 'name',
        'email': 'email',
        'phone': 'phone',
        'room': 'room',
        'institute_id': 'instituteId',
        'credentials_non_expired': 'credentialsNonExpired',
    }

    name = StringField('Название')
    email = EmailField('E-mail')
    phone = StringField('Телефон', render_kw={'placeholder': '+79991234567'})
    room = StringField('Кабинет')
    institute_id = SelectField('Институт', coerce=int, choices=[NOT_SELECTED], default=0)
    credentials_non_expired = BooleanField('Учетная запись активна')

    submit = SubmitField('Сохранить')
