from __future__ import annotations
import logging
from flask import Blueprint, request, g
from vendor_portal.decorators.auth import vendor_session_required
from vendor_portal.errors import StoreError
from vendor_portal.models.vendor import Vendor
from vendor_portal.routes.serializers import vendor_json, product_json
from vendor_portal.services.orchestrator import ProductMutationOrchestrator, MutationOutcome
from vendor_portal.services.products import ProductStore
from vendor_portal.services.quota import QuotaGate
from vendor_portal.utils.validation import pick, product_fields, require_text

vendor_bp = Blueprint('vendor', __name__)
log = logging.getLogger(__name__)


def _orchestrator() -> ProductMutationOrchestrator:
    vs = g.vendor_session
    return ProductMutationOrchestrator(vs, QuotaGate(vs.vendors), ProductStore(), vs.vendors)


def _outcome_json(outcome: MutationOutcome):
    vendors = g.vendor_session.vendors
    try:
        count = vendors.count_products(outcome.vendor.id)
    except StoreError as e:
        # the mutation is committed; report it without the count
        log.warning('products_count unavailable for vendor %s: %s', outcome.vendor.id, e.reason)
        count = None
    return {
        'product': product_json(outcome.product),
        'vendor': vendor_json(outcome.vendor, count),
        'counter_synced': outcome.counter_synced,
        'warnings': outcome.warnings or [],
    }


@vendor_bp.get('/quota')
@vendor_session_required('VENDOR.PRODUCT.READ')
def quota():
    vs = g.vendor_session
    return QuotaGate(vs.vendors).snapshot(vs.vendor)


@vendor_bp.get('/products')
@vendor_session_required('VENDOR.PRODUCT.READ')
def list_products():
    vs = g.vendor_session
    rows = ProductStore().list_products(vendor_id=vs.vendor_id, search=request.args.get('q'))
    return {'data': [product_json(p) for p in rows], 'total': len(rows)}


@vendor_bp.post('/products')
@vendor_session_required('VENDOR.PRODUCT.CREATE')
def add_product():
    fields = product_fields(request.json or {}, creating=True)
    outcome = _orchestrator().add_product(fields)
    return _outcome_json(outcome), 201


@vendor_bp.put('/products/<int:product_id>')
@vendor_session_required('VENDOR.PRODUCT.UPDATE')
def edit_product(product_id: int):
    fields = product_fields(request.json or {}, creating=False)
    outcome = _orchestrator().edit_product(product_id, fields)
    return _outcome_json(outcome)


@vendor_bp.delete('/products/<int:product_id>')
@vendor_session_required('VENDOR.PRODUCT.DELETE')
def delete_product(product_id: int):
    confirmed = request.args.get('confirm', '').lower() in ('1', 'true', 'yes')
    outcome = _orchestrator().delete_product(product_id, lambda prompt: confirmed)
    return _outcome_json(outcome)


@vendor_bp.put('/profile')
@vendor_session_required('VENDOR.PROFILE.UPDATE')
def update_profile():
    vs = g.vendor_session
    data = request.json or {}
    # limits, counters and login identity are administrator-owned and ignored here
    fields = pick(data, Vendor.PROFILE_FIELDS)
    for key in ('name', 'phone_number', 'store_location', 'username'):
        if key in fields:
            fields[key] = require_text(data, key)
    if 'logo_url' in fields:
        fields['logo_url'] = fields['logo_url'] or None
    vendor = vs.vendors.update_vendor(vs.vendor_id, fields) if fields else vs.refresh()
    return vendor_json(vendor, vs.vendors.count_products(vendor.id))
