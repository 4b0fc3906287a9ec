import pytest
from vendor_portal import get_db
from vendor_portal.models.audit import AuditLog
from vendor_portal.services.vendors import VendorsService
from tests.test_lifecycle_helpers import login, bearer, add_product, assert_error, jwt_headers
from tests.test_utils_seed import ensure_admin, create_vendor, create_product


@pytest.fixture()
def admin_headers(client, app_instance):
    with app_instance.app_context():
        email = ensure_admin().email
    return bearer(login(client, email, admin=True))


def _seed_vendor(app_instance, **kw):
    with app_instance.app_context():
        v = create_vendor(**kw)
        return v.id, v.gmail_account


def _audit_rows(app_instance, action, vendor_id):
    with app_instance.app_context():
        return get_db().query(AuditLog).filter_by(action=action, entity_id=str(vendor_id)).all()


def test_admin_login_requires_admin_permissions(client, app_instance):
    _, email = _seed_vendor(app_instance)
    err = assert_error(client.post('/admin/auth/login', json={'email': email, 'password': 'secret1'}), 403)
    assert err['reason'] == 'not-an-admin'


def test_vendor_token_cannot_reach_admin(client, app_instance):
    _, email = _seed_vendor(app_instance)
    headers = bearer(login(client, email))
    assert client.get('/admin/vendors', headers=headers).status_code == 403


def test_list_vendors_filter_sort_and_etag(client, app_instance, admin_headers):
    _seed_vendor(app_instance, name='Zeta Listing')
    _seed_vendor(app_instance, name='Alpha Listing')
    resp = client.get('/admin/vendors?name=Listing&sort=-name&limit=10', headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    names = [v['name'] for v in body['data']]
    assert names == ['Zeta Listing', 'Alpha Listing']
    assert body['pagination']['limit'] == 10
    assert body['data'][0]['products_count'] == 0
    etag = resp.headers['ETag']
    again = client.get('/admin/vendors?name=Listing&sort=-name&limit=10', headers={**admin_headers, 'If-None-Match': etag})
    assert again.status_code == 304
    assert client.get('/admin/vendors?sort=password', headers=admin_headers).status_code == 400


def test_at_product_limit_filter(client, app_instance, admin_headers):
    with app_instance.app_context():
        full = create_vendor(name='Full Shelf', product_limit=1)
        create_product(full)
        full_id = full.id
    ids = [v['id'] for v in client.get('/admin/vendors?at_product_limit=true&limit=200', headers=admin_headers).get_json()['data']]
    assert full_id in ids


def test_get_vendor_not_found(client, admin_headers):
    assert client.get('/admin/vendors/987654', headers=admin_headers).status_code == 404


def test_update_limits_and_audit_diff(client, app_instance, admin_headers):
    vendor_id, _ = _seed_vendor(app_instance)
    resp = client.put(f'/admin/vendors/{vendor_id}', json={'product_limit': 12, 'edit_product_limit': 0}, headers=admin_headers)
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert (body['product_limit'], body['edit_product_limit'], body['delete_product_limit']) == (12, 0, 5)
    rows = _audit_rows(app_instance, 'VENDOR.UPDATE', vendor_id)
    assert len(rows) == 1
    assert rows[0].meta['changes']['product_limit'] == {'before': 5, 'after': 12}


@pytest.mark.parametrize('payload', [
    {'product_limit': 0},
    {'edit_product_limit': -1},
    {'delete_product_limit': 'ten'},
    {'product_limit': True},
])
def test_update_rejects_bad_limits(client, app_instance, admin_headers, payload):
    vendor_id, _ = _seed_vendor(app_instance)
    assert client.put(f'/admin/vendors/{vendor_id}', json=payload, headers=admin_headers).status_code == 400


def test_lowered_limit_blocks_adds_but_keeps_products(client, app_instance, admin_headers):
    vendor_id, email = _seed_vendor(app_instance)
    vendor_headers = bearer(login(client, email))
    for name in ('A', 'B', 'C'):
        add_product(client, vendor_headers, name)
    client.put(f'/admin/vendors/{vendor_id}', json={'product_limit': 2}, headers=admin_headers)
    err = assert_error(client.post('/vendor/products', json={'name': 'D'}, headers=vendor_headers), 403, 'QUOTA_EXCEEDED')
    assert (err['used'], err['limit']) == (3, 2)
    assert client.get('/vendor/products', headers=vendor_headers).get_json()['total'] == 3


def test_raising_edit_limit_reopens_edits(client, app_instance, admin_headers):
    vendor_id, email = _seed_vendor(app_instance, edit_product_limit=1, edit_product_used=1)
    vendor_headers = bearer(login(client, email))
    pid = add_product(client, vendor_headers)['product']['id']
    assert client.put(f'/vendor/products/{pid}', json={'name': 'x'}, headers=vendor_headers).status_code == 403
    client.put(f'/admin/vendors/{vendor_id}', json={'edit_product_limit': 3}, headers=admin_headers)
    resp = client.put(f'/vendor/products/{pid}', json={'name': 'x'}, headers=vendor_headers)
    assert resp.status_code == 200
    assert resp.get_json()['vendor']['edit_product_used'] == 2


def test_reset_counters(client, app_instance, admin_headers):
    vendor_id, _ = _seed_vendor(app_instance, edit_product_limit=5, edit_product_used=5, delete_product_used=3)
    resp = client.post(f'/admin/vendors/{vendor_id}/counters/edit/reset', headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert (body['edit_product_used'], body['edit_product_limit'], body['delete_product_used']) == (0, 5, 3)
    resp = client.post(f'/admin/vendors/{vendor_id}/counters/delete/reset', headers=admin_headers)
    assert resp.get_json()['delete_product_used'] == 0
    metas = sorted(r.meta['counter'] for r in _audit_rows(app_instance, 'VENDOR.COUNTER.RESET', vendor_id))
    assert metas == ['delete', 'edit']
    assert client.post(f'/admin/vendors/{vendor_id}/counters/add/reset', headers=admin_headers).status_code == 404
    assert client.post('/admin/vendors/987654/counters/edit/reset', headers=admin_headers).status_code == 404


def test_reset_requires_counter_permission(client, app_instance):
    vendor_id, _ = _seed_vendor(app_instance)
    with app_instance.app_context():
        headers = jwt_headers(1, ['ADMIN.VENDOR.READ'])
    assert client.post(f'/admin/vendors/{vendor_id}/counters/edit/reset', headers=headers).status_code == 403


def test_password_reset(client, app_instance, admin_headers):
    vendor_id, email = _seed_vendor(app_instance)
    weak = client.post(f'/admin/vendors/{vendor_id}/password', json={'new_password': '123'}, headers=admin_headers)
    assert_error(weak, 400, 'IDENTITY_ERROR')
    ok = client.post(f'/admin/vendors/{vendor_id}/password', json={'new_password': 'reset-pw'}, headers=admin_headers)
    assert ok.status_code == 200
    login(client, email, 'reset-pw')
    assert len(_audit_rows(app_instance, 'VENDOR.PASSWORD.RESET', vendor_id)) == 1


def test_update_with_new_password_and_email(client, app_instance, admin_headers):
    vendor_id, _ = _seed_vendor(app_instance)
    new_email = f'moved-{vendor_id}@gmail.com'
    resp = client.put(f'/admin/vendors/{vendor_id}', json={'gmail_account': new_email, 'new_password': 'another-pw'}, headers=admin_headers)
    assert resp.status_code == 200, resp.get_json()
    assert resp.get_json()['gmail_account'] == new_email
    login(client, new_email, 'another-pw')


def test_sync_products(client, app_instance, admin_headers):
    with app_instance.app_context():
        vendor = create_vendor(name='Sync Before')
        create_product(vendor, 'P1')
        vendor_id = vendor.id
    client.put(f'/admin/vendors/{vendor_id}', json={'name': 'Sync After'}, headers=admin_headers)
    resp = client.post(f'/admin/vendors/{vendor_id}/sync-products', headers=admin_headers)
    assert resp.get_json() == {'id': vendor_id, 'products_updated': 1}
    listing = client.get(f'/admin/products?vendor_id={vendor_id}', headers=admin_headers).get_json()['data']
    assert [p['vendor_name'] for p in listing] == ['Sync After']


def test_admin_products_bypass_quota(client, app_instance, admin_headers):
    vendor_id, _ = _seed_vendor(app_instance, product_limit=1, edit_product_limit=0, delete_product_limit=0)
    created = []
    for name in ('One', 'Two'):
        resp = client.post('/admin/products', json={'vendor_id': vendor_id, 'name': name, 'price': 5}, headers=admin_headers)
        assert resp.status_code == 201, resp.get_json()
        created.append(resp.get_json()['id'])
    upd = client.put(f'/admin/products/{created[0]}', json={'name': 'Uno'}, headers=admin_headers)
    assert upd.get_json()['name'] == 'Uno'
    assert client.delete(f'/admin/products/{created[1]}', headers=admin_headers).status_code == 200
    with app_instance.app_context():
        v = VendorsService().get_vendor_by_id(vendor_id)
        assert (v.edit_product_used, v.delete_product_used) == (0, 0)
        assert VendorsService().count_products(vendor_id) == 1
    assert client.post('/admin/products', json={'vendor_id': 987654, 'name': 'x'}, headers=admin_headers).status_code == 400


def test_vendor_audit_history(client, app_instance, admin_headers):
    vendor_id, _ = _seed_vendor(app_instance)
    client.put(f'/admin/vendors/{vendor_id}', json={'delete_product_limit': 2}, headers=admin_headers)
    client.post(f'/admin/vendors/{vendor_id}/counters/delete/reset', headers=admin_headers)
    resp = client.get(f'/admin/vendors/{vendor_id}/audit', headers=admin_headers)
    assert resp.status_code == 200
    rows = resp.get_json()['data']
    assert [r['action'] for r in rows] == ['VENDOR.COUNTER.RESET', 'VENDOR.UPDATE']
    assert rows[0]['meta'] == {'counter': 'delete'}
    assert rows[0]['actor_user_id'] > 0
    assert client.get('/admin/vendors/987654/audit', headers=admin_headers).status_code == 404
