import traceback

from flask import jsonify, current_app


class BookingError(Exception):
    """Base class for errors raised by the booking core"""
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'message': self.message}


class ValidationError(BookingError):
    """Malformed or missing input, with field-level messages"""
    status_code = 400

    def __init__(self, message='Invalid input', errors=None):
        super().__init__(message)
        self.errors = errors or {}

    @classmethod
    def for_field(cls, field, message):
        return cls(message, errors={field: [message]})

    def to_dict(self):
        return {'message': self.message, 'errors': self.errors}


class NotFoundError(BookingError):
    status_code = 404

    def __init__(self, entity_type, entity_id=None):
        name = entity_type.replace('_', ' ').capitalize()
        super().__init__(f'{name} not found')
        self.entity_type = entity_type
        self.entity_id = entity_id


class ConflictError(BookingError):
    """The requested slot overlaps an existing appointment"""
    status_code = 409

    def __init__(self, appointment_id, message='Time slot conflicts with an existing appointment'):
        super().__init__(message)
        self.appointment_id = appointment_id

    def to_dict(self):
        return {'message': self.message, 'conflicting_appointment_id': self.appointment_id}


class StateTransitionError(BookingError):
    status_code = 409

    def __init__(self, current, requested, message=None):
        super().__init__(message or f'Cannot change appointment status from {current} to {requested}')
        self.current = current
        self.requested = requested


class ReferenceInUseError(BookingError):
    """A record cannot be removed while appointments still reference it"""
    status_code = 409

    def __init__(self, entity_type, entity_id, reference_count):
        name = entity_type.replace('_', ' ')
        super().__init__(
            f'Cannot delete {name} {entity_id}: referenced by {reference_count} appointment(s). '
            f'Deactivate it instead.'
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reference_count = reference_count


class PersistenceError(BookingError):
    """The store was unavailable or the transaction was aborted"""
    status_code = 503

    def __init__(self, step, original=None):
        super().__init__(f'Persistence failure during {step}')
        self.step = step
        self.original = original

    def to_dict(self):
        # Raw driver detail stays in the logs
        return {'message': 'The service is temporarily unavailable. Please try again.'}


def register_error_handlers(app):
    """Map the booking error taxonomy onto JSON responses"""

    @app.errorhandler(BookingError)
    def handle_booking_error(error):
        if isinstance(error, PersistenceError):
            error_trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            current_app.logger.error(f"{error.message}: {error.original!r}\n{error_trace}")
        else:
            current_app.logger.info(f"{type(error).__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'message': 'Not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'message': 'Method not allowed'}), 405
