from tests.test_utils_seed import create_vendor, create_product


def test_public_vendor_page(client, app_instance):
    with app_instance.app_context():
        vendor = create_vendor(name='Oasis Weaving', edit_product_used=2)
        create_product(vendor, 'Blanket', price=40)
        create_product(vendor, 'Pillow', price=15)
        slug = vendor.slug
    resp = client.get(f'/store/vendors/{slug}')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['vendor'] == {
        'name': 'Oasis Weaving',
        'slug': slug,
        'logo_url': 'https://cdn.example.com/logo.png',
        'store_location': 'Cairo',
        'phone_number': '+20100000000',
    }
    assert [p['name'] for p in body['products']] == ['Blanket', 'Pillow']
    assert body['products'][0]['price'] == 40


def test_unknown_slug(client):
    resp = client.get('/store/vendors/no-such-vendor-here')
    assert resp.status_code == 404
    assert resp.get_json()['error']['status'] == 404
