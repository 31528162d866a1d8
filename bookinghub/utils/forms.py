from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms.validators import StopValidation

from bookinghub.errors import ValidationError


def _to_formdata(payload):
    formdata = MultiDict()
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        elif isinstance(value, (dict, list)):
            # Only scalars are accepted; let the field reject it
            value = ''
        formdata.add(key, str(value))
    return formdata


class JsonForm(FlaskForm):
    """
    Base form for JSON request bodies
    Each subclass enumerates the fields a request may carry; any other key
    is rejected rather than silently ignored.
    """

    class Meta:
        csrf = False

    @classmethod
    def load(cls, payload):
        """Validate payload and return a dict of the submitted fields only"""
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError('Request body must be a JSON object')

        form = cls(formdata=_to_formdata(payload))

        errors = {}
        for key in payload:
            if key not in form._fields:
                errors[key] = ['Unknown field.']

        if not form.validate():
            errors.update(form.errors)
        if errors:
            raise ValidationError('Invalid input', errors=errors)

        submitted = {key for key, value in payload.items() if value is not None}
        return {name: field.data for name, field in form._fields.items() if name in submitted}


def strip(value):
    return value.strip() if isinstance(value, str) else value


class NotBlank:
    """
    Optional() for update forms on required columns
    An absent key is skipped; a key that is present must carry a value.
    """
    field_flags = {'optional': True}

    def __init__(self, message='This field cannot be blank.'):
        self.message = message

    def __call__(self, form, field):
        if not field.raw_data:
            field.errors[:] = []
            raise StopValidation()
        value = field.raw_data[0]
        if isinstance(value, str) and not value.strip():
            # One message instead of the parse error for an empty string
            field.errors[:] = []
            raise StopValidation(self.message)
