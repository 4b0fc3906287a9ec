from __future__ import annotations
"""Quota gate: read-only answers to "may this vendor add/edit/delete right now?".

Checks never mutate counters. The add check always goes back to the store for
the owned-product count, since any count the caller holds may be stale (other
tabs or devices of the same vendor).
"""
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class QuotaStatus:
    allowed: bool
    used: int
    limit: int

    @classmethod
    def from_counters(cls, used: int, limit: int) -> 'QuotaStatus':
        used = int(used or 0)
        limit = int(limit or 0)
        return cls(allowed=used < limit, used=used, limit=limit)

    @property
    def remaining(self) -> int:
        # an admin may lower a limit below historical usage
        return max(0, self.limit - self.used)

    def as_dict(self):
        data = asdict(self)
        data['remaining'] = self.remaining
        return data


class QuotaGate:
    def __init__(self, vendors):
        self.vendors = vendors

    def can_add(self, vendor) -> bool:
        return bool(self.vendors.can_vendor_add_product(vendor.id))

    def add_status(self, vendor) -> QuotaStatus:
        return self.vendors.add_product_status(vendor.id)

    def can_edit(self, vendor) -> QuotaStatus:
        return self.vendors.can_vendor_edit_product(vendor.id)

    def can_delete(self, vendor) -> QuotaStatus:
        return self.vendors.can_vendor_delete_product(vendor.id)

    def snapshot(self, vendor):
        return {
            'add': self.add_status(vendor).as_dict(),
            'edit': self.can_edit(vendor).as_dict(),
            'delete': self.can_delete(vendor).as_dict(),
        }


__all__ = ['QuotaStatus', 'QuotaGate']
