from functools import wraps
from flask import abort, g
from flask_jwt_extended import verify_jwt_in_request
from vendor_portal.services.policy import has_permissions
from vendor_portal.services.session import VendorSession
from vendor_portal.services.vendors import VendorsService


def require_permissions(*codes: str):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not has_permissions(*codes):
                abort(403, description='Missing permission')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def vendor_session_required(*codes: str):
    """Build the acting ``VendorSession`` into ``g.vendor_session``.

    A request without a vendor identity is refused with ``Unauthenticated``
    before the view runs; permission codes are checked afterwards.
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            session = VendorSession.from_request(VendorsService())
            session.require_vendor()
            if codes and not has_permissions(*codes):
                abort(403, description='Missing permission')
            g.vendor_session = session
            return fn(*args, **kwargs)
        return wrapper
    return outer
