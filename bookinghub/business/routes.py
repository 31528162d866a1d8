from flask import Blueprint, request, jsonify, g, current_app
from flask_login import login_required, current_user
from functools import wraps
from bookinghub.business.forms import (
    BusinessForm, BusinessUpdateForm, ServiceForm, ServiceUpdateForm,
    StaffForm, StaffUpdateForm, AvailabilityForm, AvailabilityUpdateForm
)
from bookinghub.booking.catalog import remove_service, remove_staff
from bookinghub.errors import NotFoundError, ValidationError
from bookinghub.storage import storage
from bookinghub.utils.audit import record_audit

business_bp = Blueprint('business', __name__, url_prefix='/api')


# Custom decorator to ensure the current user has finished onboarding
def business_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        business = storage.get_business_by_user_id(current_user.id)
        if business is None:
            return jsonify({'message': 'Business not found'}), 404
        g.business = business
        return f(*args, **kwargs)
    return decorated_function


def _changes(obj, data):
    """Old and new values of the fields an update actually touches"""
    old_values = {field: getattr(obj, field) for field in data}
    return {'old_values': old_values, 'new_values': dict(data)}


@business_bp.route('/business', methods=['POST'])
@login_required
def create_business():
    """Onboarding: create the one business owned by the current user"""
    if storage.get_business_by_user_id(current_user.id) is not None:
        raise ValidationError('Business already exists for this account')

    data = BusinessForm.load(request.get_json(silent=True))

    with storage.transaction('create business'):
        business = storage.create_business(current_user.id, **data)
        record_audit('create', 'business', entity_id=business.id, business_id=business.id, details=data)

    current_app.logger.info(f"User {current_user.id} created business {business.id}")
    return jsonify(business.to_dict()), 201


@business_bp.route('/business', methods=['GET'])
@login_required
@business_required
def get_business():
    return jsonify(g.business.to_dict())


@business_bp.route('/business', methods=['PUT'])
@login_required
@business_required
def update_business():
    data = BusinessUpdateForm.load(request.get_json(silent=True))

    with storage.transaction('update business'):
        audit_details = _changes(g.business, data)
        storage.update_business(g.business, data)
        record_audit('update', 'business', entity_id=g.business.id, business_id=g.business.id,
                     details=audit_details)

    return jsonify(g.business.to_dict())


# Services

@business_bp.route('/services', methods=['GET'])
@login_required
@business_required
def list_services():
    services = storage.get_services(g.business.id)
    return jsonify([s.to_dict() for s in services])


@business_bp.route('/services', methods=['POST'])
@login_required
@business_required
def create_service():
    data = ServiceForm.load(request.get_json(silent=True))

    with storage.transaction('create service'):
        service = storage.create_service(g.business.id, **data)
        record_audit('create', 'service', entity_id=service.id, business_id=g.business.id, details=data)

    return jsonify(service.to_dict()), 201


@business_bp.route('/services/<int:service_id>', methods=['PUT'])
@login_required
@business_required
def update_service(service_id):
    service = storage.get_service(service_id, g.business.id)
    if service is None:
        raise NotFoundError('service', service_id)

    data = ServiceUpdateForm.load(request.get_json(silent=True))

    with storage.transaction('update service'):
        audit_details = _changes(service, data)
        storage.update_service(service, data)
        record_audit('update', 'service', entity_id=service.id, business_id=g.business.id,
                     details=audit_details)

    return jsonify(service.to_dict())


@business_bp.route('/services/<int:service_id>', methods=['DELETE'])
@login_required
@business_required
def delete_service(service_id):
    remove_service(storage, g.business.id, service_id)
    return '', 204


# Staff

@business_bp.route('/staff', methods=['GET'])
@login_required
@business_required
def list_staff():
    staff = storage.get_staff(g.business.id)
    return jsonify([s.to_dict() for s in staff])


@business_bp.route('/staff', methods=['POST'])
@login_required
@business_required
def create_staff():
    data = StaffForm.load(request.get_json(silent=True))

    with storage.transaction('create staff'):
        staff_member = storage.create_staff(g.business.id, **data)
        record_audit('create', 'staff', entity_id=staff_member.id, business_id=g.business.id, details=data)

    return jsonify(staff_member.to_dict()), 201


@business_bp.route('/staff/<int:staff_id>', methods=['PUT'])
@login_required
@business_required
def update_staff(staff_id):
    staff_member = storage.get_staff_member(staff_id, g.business.id)
    if staff_member is None:
        raise NotFoundError('staff_member', staff_id)

    data = StaffUpdateForm.load(request.get_json(silent=True))

    with storage.transaction('update staff'):
        audit_details = _changes(staff_member, data)
        storage.update_staff(staff_member, data)
        record_audit('update', 'staff', entity_id=staff_member.id, business_id=g.business.id,
                     details=audit_details)

    return jsonify(staff_member.to_dict())


@business_bp.route('/staff/<int:staff_id>', methods=['DELETE'])
@login_required
@business_required
def delete_staff(staff_id):
    remove_staff(storage, g.business.id, staff_id)
    return '', 204


# Availability

@business_bp.route('/staff/<int:staff_id>/availability', methods=['GET'])
@login_required
@business_required
def list_availability(staff_id):
    staff_member = storage.get_staff_member(staff_id, g.business.id)
    if staff_member is None:
        raise NotFoundError('staff_member', staff_id)

    windows = storage.get_availability(staff_member.id)
    return jsonify([w.to_dict() for w in windows])


@business_bp.route('/staff/<int:staff_id>/availability', methods=['POST'])
@login_required
@business_required
def create_availability(staff_id):
    staff_member = storage.get_staff_member(staff_id, g.business.id)
    if staff_member is None:
        raise NotFoundError('staff_member', staff_id)

    data = AvailabilityForm.load(request.get_json(silent=True))

    with storage.transaction('create availability'):
        window = storage.create_availability(staff_member.id, **data)
        record_audit('create', 'availability', entity_id=window.id, business_id=g.business.id,
                     details=dict(data, staff_id=staff_member.id))

    return jsonify(window.to_dict()), 201


@business_bp.route('/availability/<int:availability_id>', methods=['PUT'])
@login_required
@business_required
def update_availability(availability_id):
    window = storage.get_availability_window(availability_id, g.business.id)
    if window is None:
        raise NotFoundError('availability', availability_id)

    data = AvailabilityUpdateForm.load(request.get_json(silent=True))

    # Check the window as it will be after the update
    start_time = data.get('start_time', window.start_time)
    end_time = data.get('end_time', window.end_time)
    if end_time <= start_time:
        raise ValidationError.for_field('end_time', 'End time must be after start time.')

    with storage.transaction('update availability'):
        audit_details = _changes(window, data)
        storage.update_availability(window, data)
        record_audit('update', 'availability', entity_id=window.id, business_id=g.business.id,
                     details=audit_details)

    return jsonify(window.to_dict())


@business_bp.route('/availability/<int:availability_id>', methods=['DELETE'])
@login_required
@business_required
def delete_availability(availability_id):
    window = storage.get_availability_window(availability_id, g.business.id)
    if window is None:
        raise NotFoundError('availability', availability_id)

    with storage.transaction('delete availability'):
        details = window.to_dict()
        storage.delete_availability(window)
        record_audit('delete', 'availability', entity_id=availability_id, business_id=g.business.id,
                     details=details)

    return '', 204
