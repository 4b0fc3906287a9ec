from __future__ import annotations
import logging
from vendor_portal.errors import MutationFailed, StoreError

log = logging.getLogger(__name__)


class CounterResetControl:
    """Administrative reset of the used counters. Limits are never touched."""

    def __init__(self, vendors):
        self.vendors = vendors

    def _reset(self, counter: str, reset, vendor_id: int):
        try:
            reset(vendor_id)
        except StoreError as e:
            raise MutationFailed(f'{counter} counter reset', e.reason) from e
        log.info('%s counter reset for vendor %s', counter, vendor_id)
        return self.vendors.get_vendor_by_id(vendor_id)

    def reset_edit_counter(self, vendor_id: int):
        return self._reset('edit', self.vendors.reset_edit_counter, vendor_id)

    def reset_delete_counter(self, vendor_id: int):
        return self._reset('delete', self.vendors.reset_delete_counter, vendor_id)


__all__ = ['CounterResetControl']
