from vendor_portal.errors import IdentityError, MutationFailed, QuotaExceeded


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_internal_error_shape(client, monkeypatch):
    import vendor_portal.routes.store as store_mod

    class BoomVendors:
        def get_vendor_by_slug(self, slug):
            raise RuntimeError('explode')

    monkeypatch.setattr(store_mod, 'VendorsService', BoomVendors)
    resp = client.get('/store/vendors/anything')
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'
    assert 'explode' not in body['error']['detail']


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}


def test_mutation_failed_status_follows_reason():
    assert MutationFailed('update', 'not-found').status == 404
    assert MutationFailed('update', 'permission-denied').status == 403
    assert MutationFailed('update', 'unavailable').status == 502
    assert MutationFailed('update', 'unavailable').title == 'Bad Gateway'


def test_identity_error_status_follows_reason():
    assert IdentityError('email-already-in-use').status == 409
    assert IdentityError('invalid-credential').status == 401
    assert IdentityError('weak-password').status == 400
    assert IdentityError('something-else').status == 400


def test_quota_exceeded_extra():
    err = QuotaExceeded('delete', 5, 5)
    assert err.extra() == {'action': 'delete', 'used': 5, 'limit': 5}
    assert err.status == 403
    assert '5 of 5' in err.detail
