from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email, Length, Regexp
from bookinghub.utils.forms import JsonForm, strip


class RegistrationForm(JsonForm):
    """Form for creating a business owner account"""
    username = StringField('Username', filters=[strip], validators=[
        DataRequired(),
        Length(min=3, max=80),
        Regexp(r'^[A-Za-z0-9_.-]+$', message='Use letters, digits, dots, dashes or underscores.')
    ])
    email = StringField('Email', filters=[strip], validators=[DataRequired(), Email(), Length(max=120)])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=8)])


class LoginForm(JsonForm):
    username = StringField('Username', filters=[strip], validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])
