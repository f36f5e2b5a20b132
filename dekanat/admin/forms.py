"""
Формы админ-панели
"""
from flask_wtf import FlaskForm
from wtforms import HiddenField, SelectField, SubmitField
from wtforms.validators import DataRequired


class RoleChangeForm(FlaskForm):
    """Выдача или снятие роли. Варианты ролей подставляются из справочника бэкенда"""
    email = HiddenField(validators=[DataRequired()])
    role = SelectField('Роль', validators=[DataRequired()], choices=[])
    next = HiddenField()
    submit = SubmitField('Применить')
