from __future__ import annotations
from flask import Blueprint, request, abort
from sqlalchemy import select, func
from vendor_portal import get_db
from vendor_portal.decorators.auth import require_permissions
from vendor_portal.decorators.audit import audit_log
from vendor_portal.constants.permissions import ADMIN_PERMISSION_CODES
from vendor_portal.errors import IdentityError, MutationFailed, StoreError
from vendor_portal.models.vendor import Vendor
from vendor_portal.models.product import Product
from vendor_portal.routes.serializers import vendor_json, product_json
from vendor_portal.services import identity
from vendor_portal.services.audit import entity_history
from vendor_portal.services.counters import CounterResetControl
from vendor_portal.services.policy import compute_effective_permissions, has_permissions
from vendor_portal.services.products import ProductStore
from vendor_portal.services.vendors import VendorsService
from vendor_portal.utils.listing import apply_filters, apply_multi_sort, apply_pagination, make_cached_list_response
from vendor_portal.utils.validation import pick, product_fields, require_text, validate_limit

admin_bp = Blueprint('admin', __name__)

AUDITED_VENDOR_KEYS = list(Vendor.PROFILE_FIELDS + Vendor.LIMIT_FIELDS + ('gmail_account',))


@admin_bp.post('/auth/login')
def login():
    data = request.json or {}
    email = data.get('email'); password = data.get('password')
    if not email or not password:
        abort(400, description='email & password required')
    account = identity.sign_in(email, password)
    perms = compute_effective_permissions(account.id)['perms']
    if not set(ADMIN_PERMISSION_CODES) & set(perms):
        raise IdentityError('not-an-admin', 'administrator permissions required')
    return {'access_token': identity.issue_token(account)}


# --- vendors ---

def _counts_for(vendor_ids):
    if not vendor_ids:
        return {}
    rows = get_db().execute(
        select(Product.vendor_id, func.count(Product.id)).where(Product.vendor_id.in_(vendor_ids)).group_by(Product.vendor_id)
    ).all()
    return {vid: cnt for vid, cnt in rows}


def _get_vendor_or_404(vendors: VendorsService, vendor_id: int) -> Vendor:
    vendor = vendors.get_vendor_by_id(vendor_id)
    if not vendor:
        abort(404)
    return vendor


def _admin_vendor_json(vendors: VendorsService, vendor: Vendor):
    return vendor_json(vendor, vendors.count_products(vendor.id))


def _prefetch_vendor(vendor_id: int):
    vendor = VendorsService().get_vendor_by_id(vendor_id)
    if not vendor:
        return {}
    return {k: getattr(vendor, k) for k in AUDITED_VENDOR_KEYS}


@admin_bp.get('/vendors')
@require_permissions('ADMIN.VENDOR.READ')
def list_vendors():
    q = get_db().query(Vendor).populate_existing()
    filter_specs = {
        'name': {'op': lambda qu, v: qu.filter(Vendor.name.ilike(f'%{v}%'))},
        'gmail_account': {'op': lambda qu, v: qu.filter(Vendor.gmail_account==v.strip().lower())},
        'at_product_limit': {
            'coerce': lambda v: v.lower() in ('1', 'true', 'yes'),
            'op': lambda qu, v: qu.filter(_at_limit_clause() if v else ~_at_limit_clause()),
        },
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {
        'name': Vendor.name,
        'product_limit': Vendor.product_limit,
        'edit_product_used': Vendor.edit_product_used,
        'delete_product_used': Vendor.delete_product_used,
        'updated_at': Vendor.updated_at,
        'id': Vendor.id,
    }
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Vendor.id)
    paged_q, total, limit, offset = apply_pagination(q)
    rows = paged_q.all()
    counts = _counts_for([v.id for v in rows])
    return make_cached_list_response([vendor_json(v, counts.get(v.id, 0)) for v in rows], total, limit, offset)


def _at_limit_clause():
    owned = select(func.count(Product.id)).where(Product.vendor_id==Vendor.id).scalar_subquery()
    return owned >= Vendor.product_limit


@admin_bp.get('/vendors/<int:vendor_id>')
@require_permissions('ADMIN.VENDOR.READ')
def get_vendor(vendor_id: int):
    vendors = VendorsService()
    return _admin_vendor_json(vendors, _get_vendor_or_404(vendors, vendor_id))


@admin_bp.get('/vendors/<int:vendor_id>/audit')
@require_permissions('ADMIN.VENDOR.READ')
def vendor_audit_history(vendor_id: int):
    _get_vendor_or_404(VendorsService(), vendor_id)
    return {'data': [row.as_dict() for row in entity_history('Vendor', vendor_id)]}


@admin_bp.put('/vendors/<int:vendor_id>')
@require_permissions('ADMIN.VENDOR.UPDATE')
@audit_log(
    'VENDOR.UPDATE', entity='Vendor', entity_id_key='id', diff_keys=AUDITED_VENDOR_KEYS,
    pre_fetch=lambda a, kw: _prefetch_vendor(kw.get('vendor_id')),
    meta_builder=lambda data, rv, a, kw: {'password_reset': bool((request.json or {}).get('new_password'))},
)
def update_vendor(vendor_id: int):
    vendors = VendorsService()
    vendor = _get_vendor_or_404(vendors, vendor_id)
    data = request.json or {}
    fields = pick(data, AUDITED_VENDOR_KEYS)
    for key in ('name', 'phone_number', 'store_location', 'username', 'gmail_account'):
        if key in fields:
            fields[key] = require_text(data, key)
    if 'logo_url' in fields:
        fields['logo_url'] = fields['logo_url'] or None
    for key in Vendor.LIMIT_FIELDS:
        if key in fields:
            # a vendor always keeps room for at least one product
            fields[key] = validate_limit(fields[key], key, minimum=1 if key == 'product_limit' else 0)
    new_password = data.get('new_password')
    if new_password:
        if not has_permissions('ADMIN.VENDOR.CREDENTIALS'):
            abort(403, description='Missing permission')
        identity.validate_password(new_password)
    if 'gmail_account' in fields:
        account = identity.get_account(vendor.auth_identity_ref)
        fields['gmail_account'] = identity.change_email(account, fields['gmail_account']).email
    vendor = vendors.update_vendor(vendor_id, fields)
    if new_password:
        identity.reset_password(vendor.auth_identity_ref, new_password)
    return _admin_vendor_json(vendors, vendor)


@admin_bp.post('/vendors/<int:vendor_id>/password')
@require_permissions('ADMIN.VENDOR.CREDENTIALS')
@audit_log('VENDOR.PASSWORD.RESET', entity='Vendor', entity_id_key='id')
def reset_vendor_password(vendor_id: int):
    vendors = VendorsService()
    vendor = _get_vendor_or_404(vendors, vendor_id)
    new_password = (request.json or {}).get('new_password')
    if not new_password:
        abort(400, description='new_password required')
    identity.reset_password(vendor.auth_identity_ref, new_password)
    return {'id': vendor.id, 'status': 'password-reset'}


@admin_bp.post('/vendors/<int:vendor_id>/counters/<counter>/reset')
@require_permissions('ADMIN.VENDOR.COUNTERS')
@audit_log(
    'VENDOR.COUNTER.RESET', entity='Vendor', entity_id_key='id',
    meta_builder=lambda data, rv, a, kw: {'counter': kw.get('counter')},
)
def reset_counter(vendor_id: int, counter: str):
    vendors = VendorsService()
    _get_vendor_or_404(vendors, vendor_id)
    control = CounterResetControl(vendors)
    if counter == 'edit':
        vendor = control.reset_edit_counter(vendor_id)
    elif counter == 'delete':
        vendor = control.reset_delete_counter(vendor_id)
    else:
        abort(404)
    return _admin_vendor_json(vendors, vendor)


@admin_bp.post('/vendors/<int:vendor_id>/sync-products')
@require_permissions('ADMIN.VENDOR.UPDATE')
@audit_log('VENDOR.PRODUCTS.SYNC', entity='Vendor', entity_id_key='id', meta_keys=['products_updated'])
def sync_vendor_products(vendor_id: int):
    vendors = VendorsService()
    _get_vendor_or_404(vendors, vendor_id)
    updated = vendors.sync_vendor_products(vendor_id)
    return {'id': vendor_id, 'products_updated': updated}


# --- products (unrestricted: no quotas, no counters) ---

def _stamp_from(vendor: Vendor, fields):
    fields.update(
        vendor_id=vendor.id,
        vendor_name=vendor.name,
        vendor_logo_url=vendor.logo_url,
        vendor_location=vendor.store_location,
    )
    return fields


@admin_bp.get('/products')
@require_permissions('ADMIN.PRODUCT.MANAGE')
def list_products():
    q = get_db().query(Product).populate_existing()
    filter_specs = {
        'vendor_id': {'coerce': int, 'op': lambda qu, v: qu.filter(Product.vendor_id==v)},
        'name': {'op': lambda qu, v: qu.filter(Product.name.ilike(f'%{v}%'))},
        'category': {'op': lambda qu, v: qu.filter(Product.category==v)},
    }
    q = apply_filters(q, filter_specs, request.args)
    allowed = {'name': Product.name, 'price': Product.price, 'vendor_id': Product.vendor_id, 'id': Product.id}
    q = apply_multi_sort(q, request.args.get('sort'), allowed, Product.id)
    paged_q, total, limit, offset = apply_pagination(q)
    return make_cached_list_response([product_json(p) for p in paged_q.all()], total, limit, offset)


@admin_bp.post('/products')
@require_permissions('ADMIN.PRODUCT.MANAGE')
@audit_log('PRODUCT.CREATE', entity='Product', entity_id_key='id', meta_keys=['vendor_id', 'name'])
def create_product():
    data = request.json or {}
    vendor_id = data.get('vendor_id')
    if not isinstance(vendor_id, int) or isinstance(vendor_id, bool):
        abort(400, description='vendor_id required')
    vendor = VendorsService().get_vendor_by_id(vendor_id)
    if not vendor:
        abort(400, description='vendor not found')
    fields = _stamp_from(vendor, product_fields(data, creating=True))
    try:
        product = ProductStore().create_product(fields)
    except StoreError as e:
        raise MutationFailed('create', e.reason) from e
    return product_json(product), 201


@admin_bp.put('/products/<int:product_id>')
@require_permissions('ADMIN.PRODUCT.MANAGE')
@audit_log('PRODUCT.UPDATE', entity='Product', entity_id_key='id', meta_keys=['vendor_id', 'name'])
def update_product(product_id: int):
    store = ProductStore()
    product = store.get_product(product_id)
    if not product:
        abort(404)
    fields = product_fields(request.json or {}, creating=False)
    vendor = VendorsService().get_vendor_by_id(product.vendor_id)
    if vendor:
        _stamp_from(vendor, fields)
    try:
        product = store.update_product(product_id, fields)
    except StoreError as e:
        raise MutationFailed('update', e.reason) from e
    return product_json(product)


@admin_bp.delete('/products/<int:product_id>')
@require_permissions('ADMIN.PRODUCT.MANAGE')
@audit_log('PRODUCT.DELETE', entity='Product', entity_id_key='id', meta_keys=['vendor_id', 'name'])
def delete_product(product_id: int):
    store = ProductStore()
    product = store.get_product(product_id)
    if not product:
        abort(404)
    body = product_json(product)
    try:
        store.delete_product(product_id)
    except StoreError as e:
        raise MutationFailed('delete', e.reason) from e
    return body
