from bookinghub import db
from datetime import datetime


class Service(db.Model):
    __tablename__ = 'services'

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey('businesses.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    duration = db.Column(db.Integer, nullable=False)  # Duration in minutes
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint('price >= 0', name='ck_services_price_non_negative'),
        db.CheckConstraint('duration > 0', name='ck_services_duration_positive'),
    )

    def __init__(self, business_id, name, price, duration, description=None, is_active=True):
        self.business_id = business_id
        self.name = name
        self.price = price
        self.duration = duration
        self.description = description
        self.is_active = is_active

    def to_dict(self):
        return {
            'id': self.id,
            'business_id': self.business_id,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'duration': self.duration,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<Service {self.name}>'
