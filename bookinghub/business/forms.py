from wtforms import StringField, TextAreaField, BooleanField, DecimalField, IntegerField, TimeField
from wtforms.validators import DataRequired, InputRequired, Email, Length, Optional, NumberRange, ValidationError
from bookinghub.utils.forms import JsonForm, NotBlank, strip


class BusinessForm(JsonForm):
    """Onboarding form creating the tenant"""
    name = StringField('Business Name', filters=[strip], validators=[DataRequired(), Length(max=120)])
    industry = StringField('Industry', filters=[strip], validators=[DataRequired(), Length(max=80)])
    description = TextAreaField('Description', validators=[Optional(), Length(max=1000)])
    email = StringField('Email', filters=[strip], validators=[DataRequired(), Email(), Length(max=120)])
    phone = StringField('Phone', filters=[strip], validators=[DataRequired(), Length(max=30)])
    address = StringField('Address', filters=[strip], validators=[Optional(), Length(max=255)])
    website = StringField('Website', filters=[strip], validators=[Optional(), Length(max=255)])
    timezone = StringField('Timezone', filters=[strip], validators=[NotBlank(), Length(max=64)])


class BusinessUpdateForm(JsonForm):
    """Fields an owner may change after onboarding"""
    name = StringField('Business Name', filters=[strip], validators=[NotBlank(), Length(max=120)])
    industry = StringField('Industry', filters=[strip], validators=[NotBlank(), Length(max=80)])
    description = TextAreaField('Description', validators=[Optional(), Length(max=1000)])
    email = StringField('Email', filters=[strip], validators=[NotBlank(), Email(), Length(max=120)])
    phone = StringField('Phone', filters=[strip], validators=[NotBlank(), Length(max=30)])
    address = StringField('Address', filters=[strip], validators=[Optional(), Length(max=255)])
    website = StringField('Website', filters=[strip], validators=[Optional(), Length(max=255)])
    timezone = StringField('Timezone', filters=[strip], validators=[NotBlank(), Length(max=64)])
    is_active = BooleanField('Accepting bookings')


class ServiceForm(JsonForm):
    """Form for creating a bookable service"""
    name = StringField('Service Name', filters=[strip], validators=[DataRequired(), Length(max=100)])
    description = TextAreaField('Description', validators=[Optional(), Length(max=500)])
    price = DecimalField('Price', places=2, validators=[InputRequired(), NumberRange(min=0)])
    duration = IntegerField('Duration (minutes)', validators=[
        InputRequired(),
        NumberRange(min=1, message='Duration must be a positive number of minutes')
    ])
    is_active = BooleanField('Active')


class ServiceUpdateForm(JsonForm):
    name = StringField('Service Name', filters=[strip], validators=[NotBlank(), Length(max=100)])
    description = TextAreaField('Description', validators=[Optional(), Length(max=500)])
    price = DecimalField('Price', places=2, validators=[NotBlank(), NumberRange(min=0)])
    duration = IntegerField('Duration (minutes)', validators=[
        NotBlank(),
        NumberRange(min=1, message='Duration must be a positive number of minutes')
    ])
    is_active = BooleanField('Active')


class StaffForm(JsonForm):
    """Form for adding a staff member"""
    name = StringField('Name', filters=[strip], validators=[DataRequired(), Length(max=100)])
    email = StringField('Email', filters=[strip], validators=[DataRequired(), Email(), Length(max=120)])
    phone = StringField('Phone', filters=[strip], validators=[Optional(), Length(max=30)])
    role = StringField('Role', filters=[strip], validators=[NotBlank(), Length(max=50)])
    is_active = BooleanField('Active')


class StaffUpdateForm(JsonForm):
    name = StringField('Name', filters=[strip], validators=[NotBlank(), Length(max=100)])
    email = StringField('Email', filters=[strip], validators=[NotBlank(), Email(), Length(max=120)])
    phone = StringField('Phone', filters=[strip], validators=[Optional(), Length(max=30)])
    role = StringField('Role', filters=[strip], validators=[NotBlank(), Length(max=50)])
    is_active = BooleanField('Active')


class AvailabilityForm(JsonForm):
    """Weekly working window; day 0 is Monday"""
    day_of_week = IntegerField('Day of Week', validators=[InputRequired(), NumberRange(min=0, max=6)])
    start_time = TimeField('Start Time', format='%H:%M', validators=[InputRequired()])
    end_time = TimeField('End Time', format='%H:%M', validators=[InputRequired()])
    is_active = BooleanField('Active')

    def validate_end_time(self, end_time):
        if self.start_time.data and end_time.data and end_time.data <= self.start_time.data:
            raise ValidationError('End time must be after start time.')


class AvailabilityUpdateForm(JsonForm):
    day_of_week = IntegerField('Day of Week', validators=[NotBlank(), NumberRange(min=0, max=6)])
    start_time = TimeField('Start Time', format='%H:%M', validators=[NotBlank()])
    end_time = TimeField('End Time', format='%H:%M', validators=[NotBlank()])
    is_active = BooleanField('Active')
