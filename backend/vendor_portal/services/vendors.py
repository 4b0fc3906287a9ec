from __future__ import annotations
"""Vendor record access and the counter RPCs backing the quota gate.

``VendorsService`` is the authoritative counter store: used counters are only
changed here, with single UPDATE statements (``used = used + 1``) so concurrent
increments from several sessions are not lost.
"""
import logging
import secrets
from typing import Any, Dict, Optional
from flask import current_app
from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from vendor_portal import get_db
from vendor_portal.errors import PortalError, StoreError
from vendor_portal.models.vendor import Vendor
from vendor_portal.models.product import Product
from vendor_portal.services.quota import QuotaStatus
from vendor_portal.utils.slugify import generate_vendor_slug

log = logging.getLogger(__name__)

_COUNTERS = {
    'edit': Vendor.edit_product_used,
    'delete': Vendor.delete_product_used,
}


class VendorsService:
    def __init__(self, session_factory=get_db):
        self._session_factory = session_factory

    @property
    def session(self):
        return self._session_factory()

    # --- record access ---

    def _read(self, stmt, what: str):
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError('unavailable', f'{what} read failed') from e

    def get_vendor_by_id(self, vendor_id: int) -> Optional[Vendor]:
        return self._read(select(Vendor).where(Vendor.id==vendor_id).execution_options(populate_existing=True), f'vendor {vendor_id}')

    def get_vendor_by_identity(self, identity_ref: int) -> Optional[Vendor]:
        return self._read(select(Vendor).where(Vendor.auth_identity_ref==identity_ref).execution_options(populate_existing=True), f'vendor for identity {identity_ref}')

    def get_vendor_by_slug(self, slug: str) -> Optional[Vendor]:
        return self._read(select(Vendor).where(Vendor.slug==slug), f'vendor {slug!r}')

    def _require(self, vendor_id: int) -> Vendor:
        vendor = self.get_vendor_by_id(vendor_id)
        if vendor is None:
            raise StoreError('not-found', f'vendor {vendor_id} not found')
        return vendor

    def _unique_slug(self, name: str, vendor_id: Optional[int] = None) -> Optional[str]:
        slug = generate_vendor_slug(name)
        if not slug:
            return None
        existing = self.get_vendor_by_slug(slug)
        if existing and existing.id != vendor_id:
            unique = f'{slug}-{secrets.token_hex(4)}'
            log.warning('slug collision for %r: %s already used by vendor %s, using %s', name, slug, existing.id, unique)
            return unique
        return slug

    def create_vendor(self, fields: Dict[str, Any]) -> Vendor:
        cfg = current_app.config
        vendor = Vendor(
            name=fields['name'],
            phone_number=fields['phone_number'],
            store_location=fields['store_location'],
            username=fields['username'],
            gmail_account=fields['gmail_account'],
            auth_identity_ref=fields['auth_identity_ref'],
            logo_url=fields.get('logo_url') or None,
            product_limit=fields.get('product_limit', cfg.get('VENDOR_DEFAULT_PRODUCT_LIMIT', Vendor.DEFAULT_LIMIT)),
            edit_product_limit=fields.get('edit_product_limit', cfg.get('VENDOR_DEFAULT_EDIT_LIMIT', Vendor.DEFAULT_LIMIT)),
            delete_product_limit=fields.get('delete_product_limit', cfg.get('VENDOR_DEFAULT_DELETE_LIMIT', Vendor.DEFAULT_LIMIT)),
            edit_product_used=0,
            delete_product_used=0,
        )
        vendor.slug = self._unique_slug(vendor.name)
        session = self.session
        session.add(vendor)
        session.commit()
        log.info('vendor %s created for identity %s', vendor.id, vendor.auth_identity_ref)
        return vendor

    def update_vendor(self, vendor_id: int, fields: Dict[str, Any]) -> Vendor:
        vendor = self._require(vendor_id)
        if 'auth_identity_ref' in fields and fields['auth_identity_ref'] != vendor.auth_identity_ref:
            raise PortalError('auth identity link cannot be changed')
        renamed = 'name' in fields and fields['name'] != vendor.name
        for key, value in fields.items():
            if key in ('id', 'auth_identity_ref', 'slug'):
                continue
            if not hasattr(Vendor, key):
                raise PortalError(f'unknown vendor field {key}')
            setattr(vendor, key, value)
        if renamed or not vendor.slug:
            vendor.slug = self._unique_slug(vendor.name, vendor.id)
        self.session.commit()
        return vendor

    def count_products(self, vendor_id: int) -> int:
        return self._read(select(func.count(Product.id)).where(Product.vendor_id==vendor_id), f'product count for vendor {vendor_id}')

    # --- quota RPCs ---

    def add_product_status(self, vendor_id: int) -> QuotaStatus:
        vendor = self._require(vendor_id)
        return QuotaStatus.from_counters(self.count_products(vendor_id), vendor.product_limit)

    def can_vendor_add_product(self, vendor_id: int) -> bool:
        return self.add_product_status(vendor_id).allowed

    def can_vendor_edit_product(self, vendor_id: int) -> QuotaStatus:
        vendor = self._require(vendor_id)
        return QuotaStatus.from_counters(vendor.edit_product_used, vendor.edit_product_limit)

    def can_vendor_delete_product(self, vendor_id: int) -> QuotaStatus:
        vendor = self._require(vendor_id)
        return QuotaStatus.from_counters(vendor.delete_product_used, vendor.delete_product_limit)

    def _write_counter(self, vendor_id: int, counter: str, value):
        column = _COUNTERS[counter]
        session = self.session
        try:
            result = session.execute(
                update(Vendor).where(Vendor.id==vendor_id).values({column.key: value}).execution_options(synchronize_session=False)
            )
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError('unavailable', f'{counter} counter write failed: {e}') from e
        if result.rowcount == 0:
            raise StoreError('not-found', f'vendor {vendor_id} not found')
        # cached Vendor rows are now stale; reads reload them through populate_existing

    def increment_edit_counter(self, vendor_id: int):
        self._write_counter(vendor_id, 'edit', Vendor.edit_product_used + 1)

    def increment_delete_counter(self, vendor_id: int):
        self._write_counter(vendor_id, 'delete', Vendor.delete_product_used + 1)

    def reset_edit_counter(self, vendor_id: int):
        self._write_counter(vendor_id, 'edit', 0)

    def reset_delete_counter(self, vendor_id: int):
        self._write_counter(vendor_id, 'delete', 0)

    # --- denormalized product fields ---

    def sync_vendor_products(self, vendor_id: int) -> int:
        """Re-stamp vendor display fields onto every product the vendor owns."""
        vendor = self._require(vendor_id)
        session = self.session
        result = session.execute(
            update(Product)
            .where(Product.vendor_id==vendor.id)
            .values(vendor_name=vendor.name, vendor_logo_url=vendor.logo_url, vendor_location=vendor.store_location)
            .execution_options(synchronize_session='fetch')
        )
        session.commit()
        log.info('synced display fields onto %s products of vendor %s', result.rowcount, vendor.id)
        return result.rowcount


__all__ = ['VendorsService']
