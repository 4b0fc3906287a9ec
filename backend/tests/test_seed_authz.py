from vendor_portal import get_db
from vendor_portal.constants.permissions import ALL_PERMISSION_CODES, ADMIN_ROLE, VENDOR_ROLE, VENDOR_PERMISSION_CODES
from vendor_portal.services.policy import compute_effective_permissions
from vendor_portal.models.authz import User
from scripts.seed_authz import run, build_role_permission_map
from tests.test_utils_seed import unique_email


def test_seed_is_idempotent(app_context, monkeypatch):
    email = unique_email('seedadmin')
    monkeypatch.setenv('SEED_ADMIN_EMAIL', email)
    monkeypatch.setenv('SEED_ADMIN_PASSWORD', 'seed-secret')
    session = get_db()
    _, _, admin_created = run(session)
    assert admin_created is True
    assert run(session) == (0, 0, False)
    roles = build_role_permission_map(session)
    assert roles[ADMIN_ROLE] == sorted(ALL_PERMISSION_CODES)
    assert roles[VENDOR_ROLE] == sorted(VENDOR_PERMISSION_CODES)
    admin = session.query(User).filter_by(email=email).one()
    assert admin.verify_password('seed-secret')
    assert set(compute_effective_permissions(admin.id)['perms']) == set(ALL_PERMISSION_CODES)


def test_seed_dry_run_rolls_back(app_context, monkeypatch):
    email = unique_email('dryadmin')
    monkeypatch.setenv('SEED_ADMIN_EMAIL', email)
    session = get_db()
    run(session, dry_run=True)
    assert session.query(User).filter_by(email=email).one_or_none() is None
