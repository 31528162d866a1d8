from wtforms import StringField, TextAreaField, SelectField, IntegerField, DateField, TimeField
from wtforms.validators import DataRequired, InputRequired, Email, Length, Optional
from bookinghub.booking import AppointmentInput, CustomerInput
from bookinghub.errors import ValidationError
from bookinghub.models.appointment import STATUSES
from bookinghub.utils.forms import JsonForm, strip


class CustomerForm(JsonForm):
    """Contact details supplied with a booking"""
    name = StringField('Name', filters=[strip], validators=[DataRequired(), Length(max=120)])
    email = StringField('Email', filters=[strip], validators=[Optional(), Email(), Length(max=120)])
    phone = StringField('Phone', filters=[strip], validators=[Optional(), Length(max=30)])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=1000)])


class AppointmentForm(JsonForm):
    """Form for booking a new appointment"""
    service_id = IntegerField('Service', validators=[InputRequired()])
    staff_id = IntegerField('Staff Member', validators=[InputRequired()])
    date = DateField('Date', format='%Y-%m-%d', validators=[InputRequired()])
    start_time = TimeField('Start Time', format='%H:%M', validators=[InputRequired()])
    end_time = TimeField('End Time', format='%H:%M', validators=[Optional()])
    notes = TextAreaField('Special Requests/Notes', validators=[Optional(), Length(max=500)])


class AppointmentStatusForm(JsonForm):
    """Form for updating appointment status"""
    status = SelectField('Status', choices=[(s, s.capitalize()) for s in STATUSES],
                         validators=[DataRequired()])


class RescheduleForm(JsonForm):
    date = DateField('Date', format='%Y-%m-%d', validators=[InputRequired()])
    start_time = TimeField('Start Time', format='%H:%M', validators=[InputRequired()])
    staff_id = IntegerField('Staff Member', validators=[Optional()])


def load_booking_request(payload, allow_customer_id=False):
    """Split a booking body into (customer, AppointmentInput).

    The body carries an ``appointment`` object and either a ``customer``
    object or, for staff-entered bookings, the ``customer_id`` of an
    existing customer.
    """
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')

    allowed = {'customer', 'appointment'}
    if allow_customer_id:
        allowed.add('customer_id')
    unknown = set(payload) - allowed
    if unknown:
        raise ValidationError('Invalid input', errors={key: ['Unknown field.'] for key in sorted(unknown)})

    errors = {}
    appointment = None
    try:
        appointment = AppointmentInput(**AppointmentForm.load(payload.get('appointment')))
    except ValidationError as e:
        errors['appointment'] = e.errors

    customer = None
    if allow_customer_id and payload.get('customer_id') is not None:
        customer = payload['customer_id']
        if isinstance(customer, bool) or not isinstance(customer, int):
            errors['customer_id'] = ['Must be an integer id.']
    else:
        try:
            customer = CustomerInput(**CustomerForm.load(payload.get('customer')))
        except ValidationError as e:
            errors['customer'] = e.errors

    if errors:
        raise ValidationError('Invalid booking request', errors=errors)
    return customer, appointment
