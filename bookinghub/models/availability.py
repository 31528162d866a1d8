from bookinghub import db

# Days of the week constants (0 = Monday, 6 = Sunday)
MONDAY = 0
TUESDAY = 1
WEDNESDAY = 2
THURSDAY = 3
FRIDAY = 4
SATURDAY = 5
SUNDAY = 6


class Availability(db.Model):
    """Weekly recurring working window for a staff member"""
    __tablename__ = 'availability'

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey('staff.id'), nullable=False, index=True)
    day_of_week = db.Column(db.Integer, nullable=False)  # 0-6 (Monday-Sunday)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    __table_args__ = (
        db.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_availability_day_of_week'),
        db.CheckConstraint('start_time < end_time', name='ck_availability_window_order'),
    )

    def __init__(self, staff_id, day_of_week, start_time, end_time, is_active=True):
        self.staff_id = staff_id
        self.day_of_week = day_of_week
        self.start_time = start_time
        self.end_time = end_time
        self.is_active = is_active

    def to_dict(self):
        return {
            'id': self.id,
            'staff_id': self.staff_id,
            'day_of_week': self.day_of_week,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<Availability: Day {self.day_of_week} - {self.start_time} to {self.end_time}>'
