from flask import current_app

from bookinghub.errors import NotFoundError, ReferenceInUseError
from bookinghub.storage import catalog_key
from bookinghub.utils.audit import record_audit


def public_catalog(storage, business_id):
    """Business profile with its bookable services and staff, cached per business"""

    def load():
        business = storage.get_business(business_id)
        if business is None or not business.is_active:
            return None
        return {
            'business': business.to_dict(),
            'services': [s.to_dict() for s in storage.get_services(business_id, active_only=True)],
            'staff': [s.to_dict() for s in storage.get_staff(business_id, active_only=True)],
        }

    catalog = storage.cache.get_or_load(catalog_key(business_id), load)
    if catalog is None:
        raise NotFoundError('business', business_id)
    return catalog


def remove_service(storage, business_id, service_id):
    """Hard delete a service nobody has booked; otherwise refuse"""
    with storage.transaction('delete service'):
        service = storage.get_service(service_id, business_id)
        if service is None:
            raise NotFoundError('service', service_id)

        references = storage.count_service_appointments(service.id)
        if references:
            raise ReferenceInUseError('service', service.id, references)

        details = service.to_dict()
        storage.delete_service(service)
        record_audit('delete', 'service', entity_id=service_id, business_id=business_id, details=details)

    current_app.logger.info(f"Deleted service {service_id} of business {business_id}")


def remove_staff(storage, business_id, staff_id):
    """Hard delete a staff member with no appointments, along with their availability"""
    with storage.transaction('delete staff'):
        staff_member = storage.get_staff_member(staff_id, business_id)
        if staff_member is None:
            raise NotFoundError('staff_member', staff_id)

        references = storage.count_staff_appointments(staff_member.id)
        if references:
            raise ReferenceInUseError('staff_member', staff_member.id, references)

        details = staff_member.to_dict()
        storage.delete_staff(staff_member)
        record_audit('delete', 'staff', entity_id=staff_id, business_id=business_id, details=details)

    current_app.logger.info(f"Deleted staff member {staff_id} of business {business_id}")
