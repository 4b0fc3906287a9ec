from __future__ import annotations
from flask import Blueprint, request, abort, g, current_app
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import IntegrityError
from vendor_portal import get_db
from vendor_portal.constants.permissions import VENDOR_ROLE
from vendor_portal.decorators.auth import vendor_session_required
from vendor_portal.errors import IdentityError
from vendor_portal.routes.serializers import vendor_json
from vendor_portal.services import identity
from vendor_portal.services.policy import assign_role
from vendor_portal.services.quota import QuotaGate
from vendor_portal.services.vendors import VendorsService
from vendor_portal.utils.validation import require_text

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/signup')
def signup():
    data = request.json or {}
    fields = {k: require_text(data, k) for k in ('name', 'phone_number', 'store_location', 'username', 'gmail_account')}
    password = data.get('password')
    if 'product_limit' in data:
        # limits are set by administrators; self-registration always starts at the default
        current_app.logger.info('ignoring product_limit supplied at signup for %s', fields['gmail_account'])
    session = get_db()
    vendors = VendorsService()
    try:
        account = identity.create_account(fields['gmail_account'], password, name=fields['username'])
        assign_role(account.id, VENDOR_ROLE, session)
        vendor = vendors.create_vendor({
            **fields,
            'gmail_account': account.email,
            'logo_url': data.get('logo_url'),
            'auth_identity_ref': account.id,
        })
    except IntegrityError:
        session.rollback()
        abort(409, description='vendor account already exists')
    except IdentityError:
        session.rollback()
        raise
    token = identity.issue_token(account, vendor_id=vendor.id)
    return {'access_token': token, 'vendor': vendor_json(vendor, 0)}, 201


@auth_bp.post('/login')
def login():
    data = request.json or {}
    email = data.get('email'); password = data.get('password')
    if not email or not password:
        abort(400, description='email & password required')
    account = identity.sign_in(email, password)
    vendors = VendorsService()
    vendor = vendors.get_vendor_by_identity(account.id)
    if vendor is None:
        raise IdentityError('not-a-vendor', 'no vendor account linked to this user')
    token = identity.issue_token(account, vendor_id=vendor.id)
    return {'access_token': token, 'vendor': vendor_json(vendor, vendors.count_products(vendor.id))}


@auth_bp.post('/logout')
@jwt_required()
def logout():
    identity.sign_out()
    return {'status': 'signed-out'}


@auth_bp.get('/me')
@vendor_session_required()
def me():
    vs = g.vendor_session
    vendor = vs.refresh()
    return {
        'vendor': vendor_json(vendor, vs.vendors.count_products(vendor.id)),
        'quota': QuotaGate(vs.vendors).snapshot(vendor),
    }


@auth_bp.post('/password')
@vendor_session_required('VENDOR.PROFILE.UPDATE')
def change_password():
    data = request.json or {}
    current = data.get('current_password'); new = data.get('new_password')
    if not current or not new:
        abort(400, description='current_password & new_password required')
    account = identity.reauthenticate(g.vendor_session.vendor.gmail_account, current)
    identity.change_password(account, new)
    return {'status': 'password-changed'}
