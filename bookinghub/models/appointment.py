from bookinghub import db
from bookinghub.errors import StateTransitionError
from datetime import datetime

# Appointment status constants
STATUS_PENDING = 'pending'
STATUS_CONFIRMED = 'confirmed'
STATUS_COMPLETED = 'completed'
STATUS_CANCELLED = 'cancelled'

STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_COMPLETED, STATUS_CANCELLED)

# Allowed moves; completed and cancelled are terminal
TRANSITIONS = {
    STATUS_PENDING: (STATUS_CONFIRMED, STATUS_CANCELLED),
    STATUS_CONFIRMED: (STATUS_COMPLETED, STATUS_CANCELLED),
    STATUS_COMPLETED: (),
    STATUS_CANCELLED: (),
}


class Appointment(db.Model):
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey('businesses.id'), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=False)
    staff_id = db.Column(db.Integer, db.ForeignKey('staff.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    status = db.Column(db.String(20), default=STATUS_PENDING, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    customer = db.relationship('Customer', backref=db.backref('appointments', lazy='dynamic'))
    service = db.relationship('Service', backref=db.backref('appointments', lazy='dynamic'))
    staff = db.relationship('Staff', backref=db.backref('appointments', lazy='dynamic'))

    __table_args__ = (
        db.Index('ix_appointments_staff_date', 'staff_id', 'date'),
        db.CheckConstraint('start_time < end_time', name='ck_appointments_time_order'),
    )

    def __init__(self, business_id, customer_id, service_id, staff_id, date, start_time, end_time,
                 status=STATUS_PENDING, notes=None):
        self.business_id = business_id
        self.customer_id = customer_id
        self.service_id = service_id
        self.staff_id = staff_id
        self.date = date
        self.start_time = start_time
        self.end_time = end_time
        self.status = status
        self.notes = notes

    def can_transition_to(self, status):
        return status in TRANSITIONS.get(self.status, ())

    def transition_to(self, status):
        if not self.can_transition_to(status):
            raise StateTransitionError(self.status, status)
        self.status = status

    def to_dict(self):
        return {
            'id': self.id,
            'business_id': self.business_id,
            'customer_id': self.customer_id,
            'service_id': self.service_id,
            'staff_id': self.staff_id,
            'date': self.date,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'status': self.status,
            'notes': self.notes,
            'created_at': self.created_at,
        }

    def __repr__(self):
        return f'<Appointment {self.id}: {self.date} {self.start_time} - {self.end_time}>'
