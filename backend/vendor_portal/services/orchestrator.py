from __future__ import annotations
"""Vendor product mutations with their quota bookkeeping.

Every operation runs its calls one after another, in this order:

    session guard -> ownership -> quota check -> mutation -> counter increment -> reconcile

Counters only move after the mutation itself succeeded, so a vendor is never
charged for a change that did not happen. If the increment fails afterwards the
mutation stands (a delete cannot be undone), the failure is logged as
``CounterSyncFailed`` and the operation still reports success. Nothing is retried.

The quota check and the mutation are not atomic: two sessions of one vendor can
both pass a check before either commits and briefly exceed a limit.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional
from vendor_portal.errors import ConfirmationRequired, CounterSyncFailed, MutationFailed, QuotaExceeded, StoreError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteConfirmation:
    product_id: int
    product_name: str
    delete_used_after: int
    delete_limit: int

    def as_dict(self):
        return asdict(self)


@dataclass
class MutationOutcome:
    product: Any
    vendor: Any
    counter_synced: bool = True
    warnings: Optional[List[str]] = None


class ProductMutationOrchestrator:
    def __init__(self, session, quota, products, vendors):
        self.session = session
        self.quota = quota
        self.products = products
        self.vendors = vendors

    def add_product(self, payload: Dict[str, Any]) -> MutationOutcome:
        vendor = self.session.require_vendor()
        try:
            allowed = self.quota.can_add(vendor)
            if not allowed:
                status = self.quota.add_status(vendor)
                raise QuotaExceeded('add', status.used, status.limit)
        except StoreError as e:
            raise MutationFailed('quota check', e.reason) from e
        # display fields are a snapshot taken now; later profile edits do not rewrite them here
        data = self.session.stamp(payload)
        try:
            product = self.products.create_product(data)
        except StoreError as e:
            raise MutationFailed('create', e.reason) from e
        log.info('vendor %s created product %s', vendor.id, product.id)
        return MutationOutcome(product=product, vendor=self._reconcile(vendor))

    def edit_product(self, product_id: int, changes: Dict[str, Any]) -> MutationOutcome:
        vendor = self.session.require_vendor()
        product = self._load(product_id, 'update')
        self.session.assert_owns(product)
        self._check('edit', self.quota.can_edit, vendor)
        data = self.session.stamp(changes)
        try:
            product = self.products.update_product(product.id, data)
        except StoreError as e:
            raise MutationFailed('update', e.reason) from e
        synced, warnings = self._bump('edit', self.vendors.increment_edit_counter, vendor.id, product.id)
        log.info('vendor %s edited product %s', vendor.id, product.id)
        return MutationOutcome(product=product, vendor=self._reconcile(vendor), counter_synced=synced, warnings=warnings)

    def delete_product(self, product_id: int, confirm: Callable[[DeleteConfirmation], bool]) -> MutationOutcome:
        vendor = self.session.require_vendor()
        product = self._load(product_id, 'delete')
        self.session.assert_owns(product)
        status = self._check('delete', self.quota.can_delete, vendor)
        prompt = DeleteConfirmation(
            product_id=product.id,
            product_name=product.name,
            delete_used_after=status.used + 1,
            delete_limit=status.limit,
        )
        if not confirm(prompt):
            raise ConfirmationRequired(prompt.as_dict())
        try:
            self.products.delete_product(product.id)
        except StoreError as e:
            raise MutationFailed('delete', e.reason) from e
        synced, warnings = self._bump('delete', self.vendors.increment_delete_counter, vendor.id, product.id)
        log.info('vendor %s deleted product %s', vendor.id, product.id)
        return MutationOutcome(product=product, vendor=self._reconcile(vendor), counter_synced=synced, warnings=warnings)

    def _load(self, product_id: int, operation: str):
        try:
            product = self.products.get_product(product_id)
        except StoreError as e:
            raise MutationFailed(operation, e.reason) from e
        if product is None:
            raise MutationFailed(operation, 'not-found', f'product {product_id} not found')
        return product

    def _check(self, action: str, check, vendor):
        try:
            status = check(vendor)
        except StoreError as e:
            raise MutationFailed('quota check', e.reason) from e
        if not status.allowed:
            raise QuotaExceeded(action, status.used, status.limit)
        return status

    def _bump(self, counter: str, increment, vendor_id: int, product_id: int):
        # the mutation is already committed here, so no failure may escape
        try:
            increment(vendor_id)
        except Exception as e:
            reason = e.reason if isinstance(e, StoreError) else type(e).__name__
            err = CounterSyncFailed(vendor_id, counter, product_id, e)
            log.warning('%s (%s)', err.detail, reason)
            return False, [err.code]
        return True, None

    def _reconcile(self, vendor):
        try:
            return self.session.reconcile(vendor.id) or vendor
        except StoreError as e:
            log.warning('could not reconcile vendor %s after mutation: %s', vendor.id, e.reason)
            return vendor


__all__ = ['ProductMutationOrchestrator', 'MutationOutcome', 'DeleteConfirmation']
