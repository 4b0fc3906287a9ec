from __future__ import annotations
"""Audit logging decorator for administrative route handlers.

Usage examples:

@audit_log('VENDOR.COUNTER.RESET', entity='Vendor', entity_id_key='id',
           meta_builder=lambda data, rv, args, kwargs: {'counter': 'edit'})
def reset_edit_counter(vendor_id): ...

@audit_log('VENDOR.LIMITS.UPDATE', entity='Vendor', entity_id_key='id',
           diff_keys=['product_limit'], pre_fetch=lambda a, kw: {...})
def update_vendor(vendor_id): ...

Parameters:
  action: required audit action code
  entity: optional entity label (Vendor, Product)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: name of the view argument to use for entity_id (fallback if entity_id_key absent).
  meta_keys: keys to project from returned JSON into meta dict.
  meta_builder: callable returning a meta dict; receives (data, original_return_value, args, kwargs).
  diff_keys / pre_fetch: record before/after values of the listed keys.

Flask view functions return dict, (dict, status) or (dict, status, headers);
the first element is inspected while the original return value is preserved.
"""

import logging
from functools import wraps
from typing import Any, Callable, Iterable, Optional, Dict

from sqlalchemy.exc import SQLAlchemyError

from vendor_portal.services.audit import add_audit
from vendor_portal import get_db

log = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    if isinstance(rv, tuple) and rv:
        return rv[0]
    return rv


def _diff(before: Dict[str, Any], after: Dict[str, Any], keys: Iterable[str]):
    changes = {}
    for k in keys:
        if k in before and k in after and before.get(k) != after.get(k):
            changes[k] = {'before': before.get(k), 'after': after.get(k)}
    return changes


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before_snapshot = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
            rv = fn(*args, **kwargs)
            data = _extract_payload(rv)
            if not isinstance(data, dict):
                data = {}
            entity_id = None
            if entity_id_key and entity_id_key in data:
                entity_id = data.get(entity_id_key)
            elif entity_id_arg and entity_id_arg in kwargs:
                entity_id = kwargs.get(entity_id_arg)
            meta = None
            if meta_builder:
                meta = meta_builder(data, rv, args, kwargs)
            elif meta_keys:
                meta = {k: data.get(k) for k in meta_keys if k in data}
            if diff_keys and before_snapshot:
                changes = _diff(before_snapshot, data, diff_keys)
                if changes:
                    meta = dict(meta or {})
                    meta['changes'] = changes
            try:
                add_audit(action, entity, entity_id, meta)
                get_db().commit()
            except SQLAlchemyError:
                # the audited action is already committed; do not fail the response
                get_db().rollback()
                log.exception('audit write failed for %s', action)
            return rv
        return wrapper
    return outer
