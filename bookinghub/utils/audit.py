from flask import request, has_request_context
from flask_login import current_user
from bookinghub import db
from bookinghub.models.audit import AuditLog


def _request_actor():
    if not has_request_context():
        return None, None
    user_id = current_user.id if current_user and current_user.is_authenticated else None
    return user_id, request.remote_addr


def record_audit(action, entity_type, entity_id=None, details=None, business_id=None):
    """
    Add an audit entry to the current session

    Parameters:
    - action: The action performed (e.g., 'create', 'update', 'cancel')
    - entity_type: The type of entity affected (e.g., 'appointment', 'service')
    - entity_id: ID of the affected entity (optional)
    - details: Additional details about the action (optional)
    - business_id: Owning business of the entity (optional)

    The entry is not committed here. It is written by the transaction that
    performs the audited mutation, so a rolled back mutation leaves no trace.
    """
    user_id, ip_address = _request_actor()

    audit_entry = AuditLog(
        user_id=user_id,
        business_id=business_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        ip_address=ip_address
    )

    db.session.add(audit_entry)
    return audit_entry
