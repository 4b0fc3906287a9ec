from __future__ import annotations
"""Acting-vendor context for one request.

A ``VendorSession`` is built explicitly (usually by ``vendor_session_required``)
and handed to whatever needs the acting vendor; nothing reads a module-level
current vendor. Product mutations take the vendor id from here only.
"""
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from vendor_portal.errors import OwnershipViolation, Unauthenticated

# keys a client may not set on a product; they come from the session
VENDOR_STAMP_FIELDS = ('vendor_id', 'vendor_name', 'vendor_logo_url', 'vendor_location')


class VendorSession:
    def __init__(self, vendors, identity_ref: Optional[int] = None, vendor=None):
        self.vendors = vendors
        self.identity_ref = identity_ref
        self._vendor = vendor

    @classmethod
    def from_request(cls, vendors) -> 'VendorSession':
        verify_jwt_in_request(optional=True)
        ident = get_jwt_identity()
        if ident is None:
            return cls(vendors)
        identity_ref = int(ident)
        return cls(vendors, identity_ref, vendors.get_vendor_by_identity(identity_ref))

    @property
    def vendor(self):
        return self._vendor

    @property
    def vendor_id(self) -> Optional[int]:
        return self._vendor.id if self._vendor is not None else None

    @property
    def is_authenticated(self) -> bool:
        return self._vendor is not None

    def require_vendor(self):
        if self._vendor is None:
            raise Unauthenticated()
        return self._vendor

    def refresh(self):
        """Reload the vendor (and its counters) from the store. Safe to call repeatedly."""
        if self._vendor is None:
            return None
        return self.reconcile(self._vendor.id)

    def reconcile(self, vendor_id: int):
        vendor = self.vendors.get_vendor_by_id(vendor_id)
        if self._vendor is not None and vendor_id == self._vendor.id and vendor is not None:
            self._vendor = vendor
        return vendor

    def assert_owns(self, product):
        vendor = self.require_vendor()
        if product is None or product.vendor_id != vendor.id:
            raise OwnershipViolation(getattr(product, 'id', None))

    def stamp(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Return ``payload`` with vendor linkage taken from the session, never from the client."""
        vendor = self.require_vendor()
        data = {k: v for k, v in payload.items() if k not in VENDOR_STAMP_FIELDS}
        data.update(
            vendor_id=vendor.id,
            vendor_name=vendor.name,
            vendor_logo_url=vendor.logo_url,
            vendor_location=vendor.store_location,
        )
        return data


__all__ = ['VendorSession', 'VENDOR_STAMP_FIELDS']
