from __future__ import annotations
"""Request payload validation helpers.

All helpers abort with 400 and a field-specific description so a vendor can
tell exactly which input was refused.
"""
from typing import Any, Dict, Iterable
from flask import abort
from vendor_portal.models.product import Product


def require_text(data: Dict[str, Any], field_name: str) -> str:
    value = data.get(field_name)
    if not isinstance(value, str) or not value.strip():
        abort(400, description=f'{field_name} required')
    return value.strip()


def validate_limit(value: Any, field_name: str, minimum: int = 0) -> int:
    """Validate a quota limit: an integer (bools rejected) not below ``minimum``."""
    if isinstance(value, bool) or not isinstance(value, int):
        abort(400, description=f'{field_name} must be an integer')
    if value < minimum:
        abort(400, description=f'{field_name} must be >= {minimum}')
    return value


def pick(data: Dict[str, Any], allowed: Iterable[str]) -> Dict[str, Any]:
    return {k: data[k] for k in allowed if k in data}


def product_fields(data: Dict[str, Any], creating: bool) -> Dict[str, Any]:
    """Project a request body onto writable product content fields."""
    fields = pick(data, Product.CONTENT_FIELDS)
    if creating or 'name' in fields:
        fields['name'] = require_text(data, 'name')
    if 'price' in fields:
        price = fields['price']
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
            abort(400, description='price must be a non-negative number')
    if 'in_stock' in fields and not isinstance(fields['in_stock'], bool):
        abort(400, description='in_stock must be a boolean')
    if not creating and not fields:
        abort(400, description='no product fields to update')
    return fields

__all__ = ['require_text', 'validate_limit', 'pick', 'product_fields']
