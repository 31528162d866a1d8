from bookinghub import db
from datetime import datetime


class Business(db.Model):
    """Tenant root: every service, staff member, customer and appointment hangs off one"""
    __tablename__ = 'businesses'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    industry = db.Column(db.String(80), nullable=False)
    description = db.Column(db.Text, nullable=True)
    email = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(30), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    website = db.Column(db.String(255), nullable=True)
    timezone = db.Column(db.String(64), default='UTC', nullable=False)  # stored only
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __init__(self, user_id, name, industry, email, phone, description=None,
                 address=None, website=None, timezone='UTC', is_active=True):
        self.user_id = user_id
        self.name = name
        self.industry = industry
        self.email = email
        self.phone = phone
        self.description = description
        self.address = address
        self.website = website
        self.timezone = timezone
        self.is_active = is_active

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'industry': self.industry,
            'description': self.description,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'website': self.website,
            'timezone': self.timezone,
            'is_active': self.is_active,
            'created_at': self.created_at,
        }

    def __repr__(self):
        return f'<Business {self.name}>'
