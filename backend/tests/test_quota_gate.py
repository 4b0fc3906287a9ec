from unittest.mock import MagicMock
from types import SimpleNamespace
from vendor_portal.services.quota import QuotaGate, QuotaStatus
from vendor_portal.services.vendors import VendorsService
from tests.test_utils_seed import create_vendor, create_product


def test_status_allows_strictly_below_limit():
    assert QuotaStatus.from_counters(4, 5).allowed is True
    assert QuotaStatus.from_counters(5, 5).allowed is False
    assert QuotaStatus.from_counters(0, 0).allowed is False


def test_remaining_never_negative_after_limit_lowered():
    status = QuotaStatus.from_counters(7, 3)
    assert status.allowed is False
    assert status.remaining == 0
    assert status.as_dict() == {'allowed': False, 'used': 7, 'limit': 3, 'remaining': 0}


def test_add_check_always_asks_the_store():
    vendors = MagicMock()
    vendors.can_vendor_add_product.side_effect = [True, False]
    gate = QuotaGate(vendors)
    vendor = SimpleNamespace(id=3)
    assert gate.can_add(vendor) is True
    assert gate.can_add(vendor) is False
    assert vendors.can_vendor_add_product.call_count == 2


def test_add_check_counts_products_from_store(app_context):
    vendor = create_vendor(product_limit=2)
    gate = QuotaGate(VendorsService())
    assert gate.can_add(vendor) is True
    create_product(vendor, 'A')
    create_product(vendor, 'B')
    assert gate.can_add(vendor) is False
    status = gate.add_status(vendor)
    assert (status.used, status.limit) == (2, 2)


def test_zero_product_limit_blocks_add(app_context):
    vendor = create_vendor(product_limit=0)
    assert QuotaGate(VendorsService()).can_add(vendor) is False


def test_checks_do_not_move_counters(app_context):
    vendor = create_vendor(edit_product_limit=3, edit_product_used=3, delete_product_used=1)
    vendors = VendorsService()
    gate = QuotaGate(vendors)
    assert gate.can_edit(vendor).allowed is False
    assert gate.can_delete(vendor).allowed is True
    gate.snapshot(vendor)
    fresh = vendors.get_vendor_by_id(vendor.id)
    assert (fresh.edit_product_used, fresh.delete_product_used) == (3, 1)


def test_snapshot_shape(app_context):
    vendor = create_vendor()
    snap = QuotaGate(VendorsService()).snapshot(vendor)
    assert set(snap) == {'add', 'edit', 'delete'}
    assert snap['add'] == {'allowed': True, 'used': 0, 'limit': 5, 'remaining': 5}
    assert snap['edit']['limit'] == 5


def test_raising_product_limit_reopens_add(app_context):
    vendor = create_vendor(product_limit=5)
    for i in range(5):
        create_product(vendor, f'P{i}')
    vendors = VendorsService()
    gate = QuotaGate(vendors)
    assert gate.can_add(vendor) is False
    vendors.update_vendor(vendor.id, {'product_limit': 6})
    assert gate.can_add(vendor) is True
    assert vendors.count_products(vendor.id) == 5


def test_reset_then_edit_is_allowed(app_context):
    from vendor_portal.services.counters import CounterResetControl
    vendor = create_vendor(edit_product_limit=5, edit_product_used=5)
    vendors = VendorsService()
    gate = QuotaGate(vendors)
    status = gate.can_edit(vendor)
    assert (status.allowed, status.used, status.limit) == (False, 5, 5)
    CounterResetControl(vendors).reset_edit_counter(vendor.id)
    assert gate.can_edit(vendor).allowed is True
    vendors.increment_edit_counter(vendor.id)
    assert vendors.get_vendor_by_id(vendor.id).edit_product_used == 1
