from __future__ import annotations
from typing import Optional
from vendor_portal.models.vendor import Vendor
from vendor_portal.models.product import Product


def vendor_json(v: Vendor, products_count: Optional[int] = None):
    return {
        'id': v.id,
        'name': v.name,
        'phone_number': v.phone_number,
        'store_location': v.store_location,
        'username': v.username,
        'gmail_account': v.gmail_account,
        'auth_identity_ref': v.auth_identity_ref,
        'logo_url': v.logo_url,
        'slug': v.slug,
        'product_limit': v.product_limit,
        'edit_product_limit': v.edit_product_limit,
        'delete_product_limit': v.delete_product_limit,
        'edit_product_used': v.edit_product_used,
        'delete_product_used': v.delete_product_used,
        'products_count': products_count,
    }


def public_vendor_json(v: Vendor):
    # storefront card: no credentials, no quota state
    return {
        'name': v.name,
        'slug': v.slug,
        'logo_url': v.logo_url,
        'store_location': v.store_location,
        'phone_number': v.phone_number,
    }


def product_json(p: Product):
    return {
        'id': p.id,
        'vendor_id': p.vendor_id,
        'vendor_name': p.vendor_name,
        'vendor_logo_url': p.vendor_logo_url,
        'vendor_location': p.vendor_location,
        'name': p.name,
        'description': p.description,
        'price': p.price,
        'category': p.category,
        'image_url': p.image_url,
        'in_stock': p.in_stock,
    }
