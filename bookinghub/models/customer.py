from bookinghub import db
from datetime import datetime


class Customer(db.Model):
    """Person booking through the public page; not a login"""
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey('businesses.id'), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(30), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_customers_business_email', 'business_id', 'email'),
        db.Index('ix_customers_business_phone', 'business_id', 'phone'),
    )

    def __init__(self, business_id, name, email=None, phone=None, notes=None):
        self.business_id = business_id
        self.name = name
        self.email = email
        self.phone = phone
        self.notes = notes

    def to_dict(self):
        return {
            'id': self.id,
            'business_id': self.business_id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'notes': self.notes,
            'created_at': self.created_at,
        }

    def __repr__(self):
        return f'<Customer {self.name}>'
