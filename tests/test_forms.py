from datetime import date, time
from decimal import Decimal

import pytest

from bookinghub.appointments.forms import load_booking_request
from bookinghub.booking import AppointmentInput, CustomerInput
from bookinghub.business.forms import (
    ServiceForm, ServiceUpdateForm, StaffUpdateForm, AvailabilityForm, AvailabilityUpdateForm, BusinessUpdateForm
)
from bookinghub.errors import ValidationError


@pytest.fixture(autouse=True)
def request_ctx(app):
    with app.test_request_context():
        yield


def test_service_form_returns_typed_values():
    data = ServiceForm.load({'name': ' Haircut ', 'price': '30.50', 'duration': 30})

    assert data == {'name': 'Haircut', 'price': Decimal('30.50'), 'duration': 30}


@pytest.mark.parametrize('payload, field', [
    ({'name': 'Cut', 'price': '-1', 'duration': 30}, 'price'),
    ({'name': 'Cut', 'price': '10', 'duration': 0}, 'duration'),
    ({'name': 'Cut', 'price': '10', 'duration': 'half an hour'}, 'duration'),
    ({'name': '', 'price': '10', 'duration': 30}, 'name'),
    ({'price': '10', 'duration': 30}, 'name'),
])
def test_service_form_field_errors(payload, field):
    with pytest.raises(ValidationError) as exc:
        ServiceForm.load(payload)
    assert field in exc.value.errors


def test_update_form_returns_only_submitted_fields():
    assert ServiceUpdateForm.load({'is_active': False}) == {'is_active': False}
    assert ServiceUpdateForm.load({'duration': 45}) == {'duration': 45}


@pytest.mark.parametrize('form, payload, field', [
    (ServiceUpdateForm, {'name': '   '}, 'name'),
    (ServiceUpdateForm, {'price': ''}, 'price'),
    (ServiceUpdateForm, {'duration': ''}, 'duration'),
    (StaffUpdateForm, {'email': ''}, 'email'),
    (BusinessUpdateForm, {'industry': ' '}, 'industry'),
    (AvailabilityUpdateForm, {'start_time': ''}, 'start_time'),
    (AvailabilityUpdateForm, {'day_of_week': ''}, 'day_of_week'),
])
def test_update_forms_reject_blank_required_values(form, payload, field):
    with pytest.raises(ValidationError) as exc:
        form.load(payload)
    assert exc.value.errors == {field: ['This field cannot be blank.']}


def test_update_forms_allow_clearing_optional_values():
    assert ServiceUpdateForm.load({'description': ''}) == {'description': ''}
    assert StaffUpdateForm.load({'phone': ''}) == {'phone': ''}


def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError) as exc:
        BusinessUpdateForm.load({'name': 'New', 'user_id': 7})
    assert exc.value.errors == {'user_id': ['Unknown field.']}


def test_body_must_be_an_object():
    with pytest.raises(ValidationError):
        ServiceUpdateForm.load(['name'])


def test_availability_window_must_be_ordered():
    data = AvailabilityForm.load({'day_of_week': 0, 'start_time': '09:00', 'end_time': '17:00'})
    assert data == {'day_of_week': 0, 'start_time': time(9, 0), 'end_time': time(17, 0)}

    with pytest.raises(ValidationError) as exc:
        AvailabilityForm.load({'day_of_week': 7, 'start_time': '17:00', 'end_time': '09:00'})
    assert set(exc.value.errors) == {'day_of_week', 'end_time'}


def test_booking_request_is_split_into_inputs():
    customer, appointment = load_booking_request({
        'customer': {'name': 'Dana', 'phone': '555-0199'},
        'appointment': {'service_id': 1, 'staff_id': 2, 'date': '2024-01-10', 'start_time': '10:00'},
    })

    assert customer == CustomerInput('Dana', phone='555-0199')
    assert appointment == AppointmentInput(service_id=1, staff_id=2, date=date(2024, 1, 10), start_time=time(10, 0))


def test_booking_request_errors_are_nested():
    with pytest.raises(ValidationError) as exc:
        load_booking_request({
            'customer': {'email': 'not-an-email'},
            'appointment': {'service_id': 1, 'date': '10/01/2024', 'start_time': '10:00'},
        })

    errors = exc.value.errors
    assert set(errors['customer']) == {'name', 'email'}
    assert set(errors['appointment']) == {'staff_id', 'date'}


def test_customer_id_only_allowed_for_staff_bookings():
    body = {
        'customer_id': 5,
        'appointment': {'service_id': 1, 'staff_id': 2, 'date': '2024-01-10', 'start_time': '10:00'},
    }

    customer, _ = load_booking_request(body, allow_customer_id=True)
    assert customer == 5

    with pytest.raises(ValidationError) as exc:
        load_booking_request(body)
    assert 'customer_id' in exc.value.errors
