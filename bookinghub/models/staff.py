from bookinghub import db
from datetime import datetime


class Staff(db.Model):
    __tablename__ = 'staff'

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey('businesses.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(30), nullable=True)
    role = db.Column(db.String(50), default='staff', nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    availability = db.relationship('Availability', backref='staff', cascade='all, delete-orphan')

    def __init__(self, business_id, name, email, phone=None, role='staff', is_active=True):
        self.business_id = business_id
        self.name = name
        self.email = email
        self.phone = phone
        self.role = role
        self.is_active = is_active

    def to_dict(self):
        return {
            'id': self.id,
            'business_id': self.business_id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'role': self.role,
            'is_active': self.is_active,
        }

    def __repr__(self):
        return f'<Staff {self.name}>'
