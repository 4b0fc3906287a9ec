from __future__ import annotations
from typing import List, Set
from flask_jwt_extended import get_jwt
from sqlalchemy import select
from vendor_portal.models.authz import UserRole, RolePermission, Permission, Role
from vendor_portal.constants.permissions import ROLE_PRESETS, ALL_PERMISSION_CODES
from vendor_portal import get_db


def current_permissions() -> Set[str]:
    claims = get_jwt()
    return set(claims.get('perms', []))


def has_permissions(*codes: str) -> bool:
    perms = current_permissions()
    return all(c in perms for c in codes)


def ensure_role(name: str, session=None) -> Role:
    """Return the named preset role, creating it and its permissions on first use."""
    session = session or get_db()
    role = session.execute(select(Role).where(Role.name==name)).scalar_one_or_none()
    if role:
        return role
    role = Role(name=name, is_system=True)
    session.add(role); session.flush()
    raw_codes = ROLE_PRESETS.get(name, [])
    codes = ALL_PERMISSION_CODES if '*' in raw_codes else raw_codes
    existing = {p.code: p for p in session.execute(select(Permission).where(Permission.code.in_(codes))).scalars()}
    for code in codes:
        perm = existing.get(code)
        if perm is None:
            service, action = code.split('.', 1)
            perm = Permission(code=code, service=service, action=action, description=code.replace('.', ' - '))
            session.add(perm); session.flush()
        session.add(RolePermission(role_id=role.id, permission_id=perm.id))
    session.flush()
    return role


def assign_role(user_id: int, role_name: str, session=None):
    session = session or get_db()
    role = ensure_role(role_name, session)
    exists = session.execute(select(UserRole).where(UserRole.user_id==user_id, UserRole.role_id==role.id)).scalar_one_or_none()
    if not exists:
        session.add(UserRole(user_id=user_id, role_id=role.id)); session.flush()
    return role


def compute_effective_permissions(user_id: int):
    session = get_db()
    role_ids = [r.role_id for r in session.execute(select(UserRole).where(UserRole.user_id==user_id)).scalars()]
    perm_codes: Set[str] = set()
    if role_ids:
        role_perms = session.execute(select(RolePermission).where(RolePermission.role_id.in_(role_ids))).scalars().all()
        perm_ids = [rp.permission_id for rp in role_perms]
        if perm_ids:
            for p in session.execute(select(Permission).where(Permission.id.in_(perm_ids))).scalars():
                perm_codes.add(p.code)
    return {
        'roles': sorted(role_ids),
        'perms': sorted(perm_codes),
    }


__all__: List[str] = [
    'current_permissions', 'has_permissions', 'ensure_role', 'assign_role',
    'compute_effective_permissions',
]
