"""Reusable HTTP helpers for the vendor and admin flows.

Patterns unified:
 - Auth header creation using direct JWT claims (when bypassing /login) or real login.
 - Vendor signup through the public endpoint.
 - Quota-limited mutation sequencing with status assertions.
"""
from __future__ import annotations
from typing import Dict, List, Optional
from flask_jwt_extended import create_access_token
from tests.test_utils_seed import unique_email

# ---------- Generic Auth Helpers ---------- #

def jwt_headers(user_id: int, perms: List[str], vendor_id: Optional[int] = None):
    token = create_access_token(identity=str(user_id), additional_claims={
        'perms': perms,
        'roles': [],
        'vendor_id': vendor_id,
    })
    return bearer(token)


def bearer(token: str) -> Dict[str, str]:
    return {'Authorization': f'Bearer {token}'}


def login(client, email: str, password: str = 'secret1', admin: bool = False) -> str:
    url = '/admin/auth/login' if admin else '/auth/login'
    resp = client.post(url, json={'email': email, 'password': password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['access_token']


def signup_payload(**overrides):
    payload = {
        'name': 'Desert Rose Crafts',
        'phone_number': '+201234567890',
        'store_location': 'Alexandria',
        'username': 'desertrose',
        'gmail_account': unique_email('signup'),
        'password': 'secret1',
    }
    payload.update(overrides)
    return payload


def signup(client, **overrides):
    """Register a vendor over HTTP; returns (headers, vendor_json)."""
    resp = client.post('/auth/signup', json=signup_payload(**overrides))
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    return bearer(body['access_token']), body['vendor']

# ---------- Assertion Helpers ---------- #

def add_product(client, headers, name: str = 'Mug', expected_status: int = 201, **fields):
    resp = client.post('/vendor/products', json={'name': name, 'price': 12.5, **fields}, headers=headers)
    assert resp.status_code == expected_status, resp.get_json()
    return resp.get_json()


def assert_error(resp, status: int, code: Optional[str] = None):
    assert resp.status_code == status, resp.get_json()
    body = resp.get_json()
    assert body['error']['status'] == status
    if code:
        assert body['error']['code'] == code
    return body['error']


__all__ = [
    'jwt_headers', 'bearer', 'login', 'signup_payload', 'signup', 'add_product', 'assert_error',
]
