"""Permission codes and role presets for the vendor and admin surfaces.

Codes read SERVICE.ACTION. Roles reference them by code, so add new codes
rather than renaming existing ones.
"""
from __future__ import annotations
from typing import List, Dict

SERVICE_ACTIONS: Dict[str, List[str]] = {
    # vendor dashboard: own profile and own products only
    'VENDOR': ['PROFILE.UPDATE', 'PRODUCT.READ', 'PRODUCT.CREATE', 'PRODUCT.UPDATE', 'PRODUCT.DELETE'],
    # admin console: any vendor, quota limits, counters and credentials
    'ADMIN': ['VENDOR.READ', 'VENDOR.UPDATE', 'VENDOR.COUNTERS', 'VENDOR.CREDENTIALS', 'PRODUCT.MANAGE'],
}

VENDOR_ROLE = 'Vendor'
ADMIN_ROLE = 'Admin'


def codes_for(service: str) -> List[str]:
    return [f"{service}.{act}" for act in SERVICE_ACTIONS[service]]


ALL_PERMISSION_CODES = [code for svc in SERVICE_ACTIONS for code in codes_for(svc)]
VENDOR_PERMISSION_CODES = codes_for('VENDOR')
ADMIN_PERMISSION_CODES = codes_for('ADMIN')

# '*' expands to every known code when the role is seeded
ROLE_PRESETS: Dict[str, List[str]] = {
    VENDOR_ROLE: VENDOR_PERMISSION_CODES,
    ADMIN_ROLE: ['*'],
}
