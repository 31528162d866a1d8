"""Booking engine.

Owns appointment lifecycle correctness: slot validation, customer
resolution and the insert run in one transaction, with the staff row
locked first so two concurrent bookings for the same staff member cannot
both pass the overlap check.

Status lifecycle::

    pending -> confirmed -> completed
       |           |
       +-----------+--> cancelled

``completed`` and ``cancelled`` are terminal.
"""
from collections import namedtuple
from datetime import datetime

from flask import current_app

from bookinghub.booking.customers import CustomerInput, CustomerResolver
from bookinghub.booking.slots import SlotValidator
from bookinghub.errors import (
    ConflictError, NotFoundError, StateTransitionError, ValidationError
)
from bookinghub.models.appointment import (
    STATUSES, STATUS_PENDING, STATUS_CONFIRMED, STATUS_COMPLETED, STATUS_CANCELLED
)
from bookinghub.storage import storage as default_storage
from bookinghub.utils.audit import record_audit
from bookinghub.utils.common import add_minutes, parse_date, parse_time, format_time

AppointmentInput = namedtuple(
    'AppointmentInput',
    ['service_id', 'staff_id', 'date', 'start_time', 'end_time', 'notes'],
    defaults=(None, None)
)

# Entry points and the status a new appointment starts in
SOURCE_PUBLIC = 'public'
SOURCE_STAFF = 'staff'

INITIAL_STATUS = {
    SOURCE_PUBLIC: STATUS_PENDING,
    SOURCE_STAFF: STATUS_CONFIRMED,
}

RESCHEDULABLE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)


class BookingEngine:

    def __init__(self, storage, clock=None):
        self.storage = storage
        self.customers = CustomerResolver(storage)
        self.slots = SlotValidator(storage)
        self._clock = clock or datetime.now

    def now(self):
        return self._clock()

    def today(self):
        return self.now().date()

    # Booking

    def book(self, business_id, customer, appointment_input, source=SOURCE_PUBLIC):
        """Create an appointment.

        `customer` is either a CustomerInput to resolve or the id of an
        existing customer of the business. Raises ValidationError,
        ConflictError, NotFoundError or PersistenceError; nothing is
        written unless the appointment is.
        """
        if source not in INITIAL_STATUS:
            raise ValueError(f'Unknown booking source: {source}')

        with self.storage.transaction('book appointment'):
            business = self.storage.get_business(business_id)
            if business is None or not business.is_active:
                raise NotFoundError('business', business_id)

            service, staff_member, day, start_time, end_time = self._check_request(
                business_id, appointment_input
            )

            # Serialize bookings for this staff member until commit
            self.storage.lock_staff_member(staff_member.id, business_id)
            self._ensure_free(staff_member.id, day, start_time, end_time)

            resolved = self._customer_for(business_id, customer)

            appointment = self.storage.create_appointment(
                business_id,
                customer_id=resolved.id,
                service_id=service.id,
                staff_id=staff_member.id,
                date=day,
                start_time=start_time,
                end_time=end_time,
                status=INITIAL_STATUS[source],
                notes=appointment_input.notes
            )
            record_audit('create', 'appointment', entity_id=appointment.id, business_id=business_id,
                         details={
                             'source': source,
                             'customer_id': resolved.id,
                             'service_id': service.id,
                             'service_name': service.name,
                             'staff_id': staff_member.id,
                             'date': day,
                             'start_time': start_time,
                             'end_time': end_time,
                             'price': service.price,
                         })

        current_app.logger.info(
            f"Booked appointment {appointment.id} for business {business_id}: "
            f"staff {staff_member.id} on {day} {format_time(start_time)}-{format_time(end_time)} ({source})"
        )
        return appointment

    def _check_request(self, business_id, appointment_input):
        """Validate the shape of a booking request, collecting field errors"""
        errors = {}

        service = self.storage.get_service(appointment_input.service_id, business_id)
        if service is None:
            errors['service_id'] = ['Unknown service for this business.']
        elif not service.is_active:
            errors['service_id'] = ['This service is not currently offered.']

        staff_member = self.storage.get_staff_member(appointment_input.staff_id, business_id)
        if staff_member is None:
            errors['staff_id'] = ['Unknown staff member for this business.']
        elif not staff_member.is_active:
            errors['staff_id'] = ['This staff member is not taking bookings.']

        day = self._parse_field(errors, 'date', parse_date, appointment_input.date)
        if day is not None and day < self.today():
            errors['date'] = ['Appointment date cannot be in the past.']

        start_time = self._parse_field(errors, 'start_time', parse_time, appointment_input.start_time)

        end_time = None
        if service is not None and start_time is not None:
            end_time = self._end_time(errors, start_time, service.duration)
            if end_time is not None and appointment_input.end_time is not None:
                supplied = self._parse_field(errors, 'end_time', parse_time, appointment_input.end_time)
                if supplied is not None and supplied != end_time:
                    errors['end_time'] = [
                        f'End time must be {format_time(end_time)} for a {service.duration} minute service.'
                    ]

        if errors:
            raise ValidationError('Invalid appointment request', errors=errors)
        return service, staff_member, day, start_time, end_time

    @staticmethod
    def _parse_field(errors, field, parser, value):
        if value is None or value == '':
            errors[field] = ['This field is required.']
            return None
        try:
            return parser(value)
        except (AttributeError, TypeError, ValueError):
            errors[field] = ['Invalid format.']
            return None

    @staticmethod
    def _end_time(errors, start_time, duration):
        try:
            return add_minutes(start_time, duration)
        except ValueError as e:
            errors['start_time'] = [str(e)]
            return None

    def _ensure_free(self, staff_id, day, start_time, end_time, exclude_appointment_id=None):
        try:
            self.slots.validate(staff_id, day, start_time, end_time, exclude_appointment_id)
        except ConflictError as e:
            current_app.logger.info(
                f"Slot conflict for staff {staff_id} on {day} "
                f"{format_time(start_time)}-{format_time(end_time)} with appointment {e.appointment_id}"
            )
            raise

    def _customer_for(self, business_id, customer):
        if isinstance(customer, CustomerInput):
            return self.customers.resolve(business_id, customer)
        existing = self.storage.get_customer(customer, business_id)
        if existing is None:
            raise NotFoundError('customer', customer)
        return existing

    # Lifecycle

    def get_appointment(self, business_id, appointment_id):
        appointment = self.storage.get_appointment(appointment_id, business_id)
        if appointment is None:
            raise NotFoundError('appointment', appointment_id)
        return appointment

    def transition(self, business_id, appointment_id, status):
        if status not in STATUSES:
            raise ValidationError.for_field('status', f'Unknown status: {status}')

        with self.storage.transaction('change appointment status'):
            appointment = self.get_appointment(business_id, appointment_id)
            old_status = appointment.status
            appointment.transition_to(status)
            self.storage.update_appointment(appointment, {})
            record_audit('update', 'appointment_status', entity_id=appointment.id, business_id=business_id,
                         details={'old_status': old_status, 'new_status': status})

        current_app.logger.info(f"Appointment {appointment_id} moved from {old_status} to {status}")
        return appointment

    def confirm(self, business_id, appointment_id):
        return self.transition(business_id, appointment_id, STATUS_CONFIRMED)

    def complete(self, business_id, appointment_id):
        return self.transition(business_id, appointment_id, STATUS_COMPLETED)

    def cancel(self, business_id, appointment_id):
        """Soft cancel: the row stays, the slot is released"""
        return self.transition(business_id, appointment_id, STATUS_CANCELLED)

    def reschedule(self, business_id, appointment_id, date, start_time, staff_id=None):
        """Move a pending or confirmed appointment to a new slot"""
        with self.storage.transaction('reschedule appointment'):
            appointment = self.get_appointment(business_id, appointment_id)
            if appointment.status not in RESCHEDULABLE_STATUSES:
                raise StateTransitionError(
                    appointment.status, 'rescheduled',
                    f'Cannot reschedule an appointment that is {appointment.status}'
                )

            request = AppointmentInput(
                service_id=appointment.service_id,
                staff_id=staff_id if staff_id is not None else appointment.staff_id,
                date=date,
                start_time=start_time
            )
            service, staff_member, day, new_start, new_end = self._check_request(business_id, request)

            self.storage.lock_staff_member(staff_member.id, business_id)
            self._ensure_free(staff_member.id, day, new_start, new_end, exclude_appointment_id=appointment.id)

            old_values = {
                'staff_id': appointment.staff_id,
                'date': appointment.date,
                'start_time': appointment.start_time,
                'end_time': appointment.end_time,
            }
            self.storage.update_appointment(appointment, {
                'staff_id': staff_member.id,
                'date': day,
                'start_time': new_start,
                'end_time': new_end,
            })
            record_audit('reschedule', 'appointment', entity_id=appointment.id, business_id=business_id,
                         details={
                             'old_values': old_values,
                             'new_values': {
                                 'staff_id': staff_member.id,
                                 'date': day,
                                 'start_time': new_start,
                                 'end_time': new_end,
                             }
                         })

        current_app.logger.info(f"Rescheduled appointment {appointment_id} to {day} {format_time(new_start)}")
        return appointment

    def delete(self, business_id, appointment_id):
        """Hard delete; completed appointments count towards revenue and stay"""
        with self.storage.transaction('delete appointment'):
            appointment = self.get_appointment(business_id, appointment_id)
            if appointment.status == STATUS_COMPLETED:
                raise StateTransitionError(
                    appointment.status, 'deleted',
                    'Completed appointments are counted in revenue and cannot be deleted'
                )
            details = appointment.to_dict()
            self.storage.delete_appointment(appointment)
            record_audit('delete', 'appointment', entity_id=appointment_id, business_id=business_id,
                         details=details)

        current_app.logger.info(f"Deleted appointment {appointment_id} of business {business_id}")

    # Slot offering

    def open_slots(self, business_id, staff_id, service_id, date):
        """Bookable start times for the public page"""
        errors = {}
        service = self.storage.get_service(service_id, business_id)
        if service is None or not service.is_active:
            errors['service_id'] = ['Unknown service for this business.']
        staff_member = self.storage.get_staff_member(staff_id, business_id)
        if staff_member is None or not staff_member.is_active:
            errors['staff_id'] = ['Unknown staff member for this business.']
        day = self._parse_field(errors, 'date', parse_date, date)
        if errors:
            raise ValidationError('Invalid slot request', errors=errors)

        today = self.today()
        if day < today:
            return []
        not_before = self.now().time() if day == today else None

        return self.slots.open_slots(
            staff_member.id,
            day,
            service.duration,
            interval=current_app.config.get('SLOT_INTERVAL_MINUTES', 30),
            not_before=not_before
        )


booking_engine = BookingEngine(default_storage)
