from __future__ import annotations
from flask import Blueprint, abort
from vendor_portal.routes.serializers import public_vendor_json, product_json
from vendor_portal.services.products import ProductStore
from vendor_portal.services.vendors import VendorsService

store_bp = Blueprint('store', __name__)


@store_bp.get('/vendors/<slug>')
def vendor_page(slug: str):
    vendor = VendorsService().get_vendor_by_slug(slug)
    if not vendor:
        abort(404)
    products = ProductStore().list_products(vendor_id=vendor.id)
    return {
        'vendor': public_vendor_json(vendor),
        'products': [product_json(p) for p in products],
    }
