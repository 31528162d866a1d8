from flask import Blueprint, request, jsonify, g
from flask_login import login_required
from sqlalchemy import func
from bookinghub import db
from bookinghub.appointments.forms import AppointmentStatusForm, RescheduleForm, load_booking_request
from bookinghub.booking import booking_engine, SOURCE_STAFF
from bookinghub.business.routes import business_required
from bookinghub.errors import ValidationError
from bookinghub.models.appointment import Appointment, STATUSES, STATUS_COMPLETED
from bookinghub.models.service import Service
from bookinghub.storage import storage
from bookinghub.utils.common import parse_date

appointments_bp = Blueprint('appointments', __name__, url_prefix='/api')


@appointments_bp.route('/appointments', methods=['GET'])
@login_required
@business_required
def list_appointments():
    """All appointments of the business, or one day's ordered by start time"""
    date_str = request.args.get('date')
    day = None
    if date_str:
        try:
            day = parse_date(date_str)
        except ValueError:
            raise ValidationError.for_field('date', 'Use YYYY-MM-DD.')

    appointments = storage.get_appointments(g.business.id, day)
    return jsonify([a.to_dict() for a in appointments])


@appointments_bp.route('/appointments/<int:appointment_id>', methods=['GET'])
@login_required
@business_required
def get_appointment(appointment_id):
    appointment = booking_engine.get_appointment(g.business.id, appointment_id)
    payload = appointment.to_dict()
    payload['customer'] = appointment.customer.to_dict() if appointment.customer else None
    return jsonify(payload)


@appointments_bp.route('/appointments', methods=['POST'])
@login_required
@business_required
def create_appointment():
    """Staff-entered booking; starts out confirmed"""
    customer, appointment_input = load_booking_request(
        request.get_json(silent=True), allow_customer_id=True
    )
    appointment = booking_engine.book(g.business.id, customer, appointment_input, source=SOURCE_STAFF)
    return jsonify(appointment.to_dict()), 201


@appointments_bp.route('/appointments/<int:appointment_id>/status', methods=['POST'])
@login_required
@business_required
def update_appointment_status(appointment_id):
    data = AppointmentStatusForm.load(request.get_json(silent=True))
    appointment = booking_engine.transition(g.business.id, appointment_id, data['status'])
    return jsonify(appointment.to_dict())


@appointments_bp.route('/appointments/<int:appointment_id>/reschedule', methods=['POST'])
@login_required
@business_required
def reschedule_appointment(appointment_id):
    data = RescheduleForm.load(request.get_json(silent=True))
    appointment = booking_engine.reschedule(
        g.business.id,
        appointment_id,
        data['date'],
        data['start_time'],
        staff_id=data.get('staff_id')
    )
    return jsonify(appointment.to_dict())


@appointments_bp.route('/appointments/<int:appointment_id>', methods=['DELETE'])
@login_required
@business_required
def delete_appointment(appointment_id):
    booking_engine.delete(g.business.id, appointment_id)
    return '', 204


@appointments_bp.route('/customers', methods=['GET'])
@login_required
@business_required
def list_customers():
    customers = storage.get_customers(g.business.id)
    return jsonify([c.to_dict() for c in customers])


@appointments_bp.route('/analytics', methods=['GET'])
@login_required
@business_required
def analytics():
    """Dashboard totals for the business"""
    business_id = g.business.id
    today = booking_engine.today()
    month_start = today.replace(day=1)

    base_query = Appointment.query.filter(Appointment.business_id == business_id)

    # Status breakdown
    status_rows = db.session.query(
        Appointment.status, func.count(Appointment.id)
    ).filter(
        Appointment.business_id == business_id
    ).group_by(Appointment.status).all()
    status_counts = {status: 0 for status in STATUSES}
    status_counts.update({status: count for status, count in status_rows})

    # Revenue from completed appointments only
    revenue_value = db.session.query(
        func.sum(Service.price)
    ).select_from(Service).join(
        Appointment, Service.id == Appointment.service_id
    ).filter(
        Appointment.business_id == business_id,
        Appointment.status == STATUS_COMPLETED
    ).scalar()

    recent_appointments = base_query.order_by(
        Appointment.created_at.desc(), Appointment.id.desc()
    ).limit(10).all()

    stats = {
        'total_appointments': base_query.count(),
        'total_customers': len(storage.get_customers(business_id)),
        'total_revenue': float(revenue_value) if revenue_value is not None else 0.0,
        'monthly_appointments': base_query.filter(Appointment.date >= month_start).count(),
        'total_services': len(storage.get_services(business_id)),
        'total_staff': len(storage.get_staff(business_id)),
        'status_counts': status_counts,
        'recent_appointments': [a.to_dict() for a in recent_appointments],
    }
    return jsonify(stats)
