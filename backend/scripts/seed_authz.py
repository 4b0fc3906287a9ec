#!/usr/bin/env python
"""Idempotent seed script for portal permissions, roles and the first administrator.

Usage:
    python backend/scripts/seed_authz.py               # seed normally
    python backend/scripts/seed_authz.py --show-roles  # print role -> permission counts after seeding
    python backend/scripts/seed_authz.py --dry-run     # run everything then rollback
    python backend/scripts/seed_authz.py --export-json roles.json

The administrator account is read from SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD.
"""
from __future__ import annotations
import os, sys, argparse, json, hashlib
from sqlalchemy import select, inspect

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from vendor_portal import create_app, get_db  # type: ignore
from vendor_portal.models.authz import Base, Permission, Role, RolePermission, User, UserRole
from vendor_portal.constants.permissions import SERVICE_ACTIONS, ROLE_PRESETS, ADMIN_ROLE, ALL_PERMISSION_CODES
import vendor_portal.models.vendor  # noqa: F401
import vendor_portal.models.product  # noqa: F401
import vendor_portal.models.audit  # noqa: F401


def ensure_schema(session):
    engine = session.get_bind()
    if not inspect(engine).has_table('permissions'):
        # bootstrap only; real deployments run `alembic upgrade head`
        print('[INFO] Schema missing, creating tables from models')
        Base.metadata.create_all(engine)


def ensure_permissions(session):
    existing = {p.code for p in session.execute(select(Permission)).scalars()}
    created = 0
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            code = f"{svc}.{act}"
            if code not in existing:
                session.add(Permission(code=code, service=svc, action=act, description=code.replace('.', ' - ')))
                created += 1
    session.flush()
    return created


def _role_codes(session, role):
    q = select(Permission.code).join(RolePermission, RolePermission.permission_id==Permission.id).where(RolePermission.role_id==role.id)
    return set(session.execute(q).scalars())


def ensure_roles(session):
    roles = {r.name: r for r in session.execute(select(Role)).scalars()}
    created = 0
    for role_name in ROLE_PRESETS:
        if role_name not in roles:
            roles[role_name] = Role(name=role_name, is_system=True)
            session.add(roles[role_name])
            created += 1
    session.flush()

    perms = {p.code: p for p in session.execute(select(Permission)).scalars()}
    for role_name, raw_codes in ROLE_PRESETS.items():
        role = roles[role_name]
        desired = set(ALL_PERMISSION_CODES) if '*' in raw_codes else set(raw_codes)
        current = _role_codes(session, role)
        for code in sorted(desired - current):
            if code not in perms:
                print(f"[WARN] Missing permission referenced by role {role_name}: {code}")
                continue
            session.add(RolePermission(role_id=role.id, permission_id=perms[code].id))
    session.flush()
    return created


def ensure_initial_admin(session):
    admin_role = session.execute(select(Role).where(Role.name==ADMIN_ROLE)).scalar_one_or_none()
    if not admin_role:
        print(f'[WARN] {ADMIN_ROLE} role missing; skipping admin user creation')
        return False
    admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com').strip().lower()
    if session.execute(select(User).where(User.email==admin_email)).scalar_one_or_none():
        return False
    user = User(name='Administrator', email=admin_email, password_hash='')
    user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(user); session.flush()
    session.add(UserRole(user_id=user.id, role_id=admin_role.id))
    print(f"[INFO] Created initial admin user {admin_email} with temporary password.")
    return True


def build_role_permission_map(session):
    return {
        role.name: sorted(_role_codes(session, role))
        for role in session.execute(select(Role)).scalars()
    }


def print_role_summary(role_map):
    if not role_map:
        print("[INFO] No roles present.")
        return
    name_w = max(len(n) for n in role_map)
    print(f"{'Role'.ljust(name_w)} | Count | Sample (up to 8)")
    print('-' * (name_w + 40))
    for name, perms in sorted(role_map.items()):
        print(f"{name.ljust(name_w)} | {str(len(perms)).rjust(5)} | {', '.join(perms[:8])}")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Seed portal permissions, roles and the first administrator")
    p.add_argument('--show-roles', action='store_true', help='Print role permission counts after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--export-json', nargs='?', const='-', metavar='FILE', help='Export role->permissions JSON (to FILE or stdout)')
    return p.parse_args(argv)


def export_json(role_map, target, dry_run):
    canonical = json.dumps(role_map, sort_keys=True, separators=(',', ':'))
    payload = {
        'roles': role_map,
        'meta': {
            'roles_checksum_sha256': hashlib.sha256(canonical.encode('utf-8')).hexdigest(),
            'distinct_permissions': len({p for plist in role_map.values() for p in plist}),
            'dry_run': dry_run,
        },
    }
    if target == '-':
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        with open(target, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, sort_keys=True)
        print(f"[INFO] Exported JSON to {target}")


def run(session, dry_run=False):
    """Seed everything inside ``session``; returns (permissions_created, roles_created, admin_created)."""
    ensure_schema(session)
    created_p = ensure_permissions(session)
    created_r = ensure_roles(session)
    created_admin = ensure_initial_admin(session)
    if dry_run:
        session.rollback()
    else:
        session.commit()
    return created_p, created_r, created_admin


def main(argv=None):
    args = parse_args(argv)
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            created_p, created_r, _ = run(session, dry_run=args.dry_run)
            label = '[DRY-RUN] (rolled back)' if args.dry_run else '[DONE]'
            print(f"{label} Permissions created: {created_p}, Roles created: {created_r}")
            role_map = build_role_permission_map(session)
            if args.show_roles:
                print('\nRole Permission Summary:')
                print_role_summary(role_map)
            if args.export_json is not None:
                export_json(role_map, args.export_json, args.dry_run)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
