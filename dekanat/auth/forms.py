"""
Формы входа и регистрации
"""
from flask_wtf import FlaskForm
from wtforms import EmailField, PasswordField, SubmitField
from wtforms.validators import DataRequired, Email, EqualTo, Length

class LoginForm(FlaskForm):
    """Форма входа"""
    email = EmailField('E-mail', validators=[DataRequired(message='E-mail обязателен')])
    password = PasswordField('Пароль', validators=[DataRequired(message='Пароль обязателен')])
    submit = SubmitField('Войти')

class RegisterForm(FlaskForm):
    """Форма регистрации: после успешной регистрации сразу выполняется вход"""
    email = EmailField('E-mail', validators=[
        DataRequired(message='E-mail обязателен'),
        Email(message='Неверный формат e-mail'),
    ])
    password = PasswordField('Пароль', validators=[
        DataRequired(message='Пароль обязателен'),
        Length(min=6, message='Пароль не короче 6 символов'),
    ])
    confirm = PasswordField('Повторите пароль', validators=[
        EqualTo('password', message='Пароли не совпадают'),
    ])
    submit = SubmitField('Зарегистрироваться')
