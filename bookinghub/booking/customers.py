from collections import namedtuple

from flask import current_app

from bookinghub.errors import ValidationError
from bookinghub.utils.audit import record_audit

CustomerInput = namedtuple('CustomerInput', ['name', 'email', 'phone', 'notes'],
                           defaults=(None, None, None))


def _clean(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


class CustomerResolver:
    """Find-or-create customers keyed by (business, contact).

    Email is the primary key for matching and phone the fallback: when the
    email belongs to one customer and the phone to another, the email match
    wins. Phone is only consulted when the email matches nobody.
    """

    def __init__(self, storage):
        self.storage = storage

    def find(self, business_id, email=None, phone=None):
        customer = None
        if email:
            customer = self.storage.get_customer_by_email(business_id, email)
        if customer is None and phone:
            customer = self.storage.get_customer_by_phone(business_id, phone)
        return customer

    def resolve(self, business_id, customer_input):
        name = _clean(customer_input.name)
        email = _clean(customer_input.email)
        phone = _clean(customer_input.phone)

        if not name:
            raise ValidationError.for_field('name', 'Name is required.')
        if not email and not phone:
            raise ValidationError(
                'An email address or phone number is required.',
                errors={'email': ['Provide an email address or phone number.'],
                        'phone': ['Provide an email address or phone number.']}
            )

        customer = self.find(business_id, email=email, phone=phone)
        if customer is not None:
            current_app.logger.debug(f"Matched customer {customer.id} for business {business_id}")
            return customer

        customer = self.storage.create_customer(
            business_id,
            name=name,
            email=email,
            phone=phone,
            notes=_clean(customer_input.notes)
        )
        record_audit('create', 'customer', entity_id=customer.id, business_id=business_id,
                     details={'name': name, 'email': email, 'phone': phone})
        current_app.logger.info(f"Created customer {customer.id} for business {business_id}")
        return customer
