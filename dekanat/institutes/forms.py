"""
Форма института
"""
from wtforms import EmailField, StringField, SubmitField

from dekanat.utils.forms import RuleSetForm
from dekanat_core.validation import INSTITUTE_RULES

class InstituteForm(RuleSetForm):
    """Форма для создания и редактирования института"""
    rules = INSTITUTE_RULES
    field_paths = {'name': 'name', 'email': 'email', 'phone': 'phone'}

    name = StringField('Название')
    email = EmailField('E-mail')
    phone = StringField('Телефон', render_kw={'placeholder': '+79991234567'})

    submit = SubmitField('Сохранить')
