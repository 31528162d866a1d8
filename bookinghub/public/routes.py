from flask import Blueprint, request, jsonify
from bookinghub.appointments.forms import load_booking_request
from bookinghub.booking import booking_engine, public_catalog, SOURCE_PUBLIC
from bookinghub.errors import ConflictError
from bookinghub.storage import storage
from bookinghub.utils.common import format_time

public_bp = Blueprint('public', __name__, url_prefix='/api/book')


@public_bp.route('/<int:business_id>', methods=['GET'])
def booking_page(business_id):
    """Business, services and staff shown on the public booking page"""
    return jsonify(public_catalog(storage, business_id))


@public_bp.route('/<int:business_id>/slots', methods=['GET'])
def available_slots(business_id):
    """Open start times for a staff member, service and date"""
    public_catalog(storage, business_id)

    slots = booking_engine.open_slots(
        business_id,
        request.args.get('staff_id', type=int),
        request.args.get('service_id', type=int),
        request.args.get('date')
    )
    return jsonify({
        'date': request.args.get('date'),
        'slots': [{'start_time': format_time(s.start), 'end_time': format_time(s.end)} for s in slots],
    })


@public_bp.route('/<int:business_id>/appointment', methods=['POST'])
def book_appointment(business_id):
    """Self-service booking; no account required"""
    customer, appointment_input = load_booking_request(request.get_json(silent=True))

    try:
        appointment = booking_engine.book(business_id, customer, appointment_input, source=SOURCE_PUBLIC)
    except ConflictError:
        # Do not reveal other customers' bookings
        return jsonify({'message': 'This time is no longer available. Please pick another time.'}), 409

    return jsonify({
        'appointment': appointment.to_dict(),
        'customer': appointment.customer.to_dict(),
    }), 201
