from functools import wraps
from flask import request, current_app, make_response
from app.models.system_models import AuditLog
from app.extensions import db
from sqlalchemy.exc import SQLAlchemyError

RESOURCE_ID_ARGS = ('patient_id', 'user_id')


def _record(action, resource, resource_id, success, details):
    log_entry = AuditLog(
        action=action,
        resource=resource,
        resource_id=resource_id,
        ip_address=request.remote_addr,
        user_agent=request.headers.get('User-Agent'),
        success=success,
        details=details
    )
    try:
        db.session.add(log_entry)
        db.session.commit()
    except SQLAlchemyError as db_error:
        current_app.audit_logger.error(f"Failed to log audit entry due to DB error: {db_error}")
        db.session.rollback()

    log = current_app.audit_logger.info if success else current_app.audit_logger.error
    log(
        f"Action='{action}', Resource='{resource}', ResourceID='{resource_id}', Success='{success}', Details='{details}'"
    )


def audit_log(action, resource):
    """Records every call of the wrapped view in the audit table and audit log."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            resource_id = next((str(kwargs[name]) for name in RESOURCE_ID_ARGS if name in kwargs), None)
            if 'index' in kwargs and resource_id is not None:
                resource_id = f"{resource_id}/clinical/{kwargs['index']}"

            try:
                # Use make_response to handle both Response objects and tuples.
                response = make_response(f(*args, **kwargs))
            except Exception as e:
                # The service layer has already rolled back its own work
                db.session.rollback()
                _record(action, resource, resource_id, False, f"An error occurred: {type(e).__name__}: {e}")
                raise

            success = response.status_code < 400
            _record(action, resource, resource_id, success, f"Request completed. Status: {response.status_code}")
            return response

        return decorated_function
    return decorator
