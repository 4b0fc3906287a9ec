from __future__ import annotations
"""Identity provider: credential storage, sign-in, token issue/revocation, password changes."""
import logging
from typing import Optional
from flask import current_app
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, verify_jwt_in_request
from sqlalchemy import select
from vendor_portal import get_db
from vendor_portal.errors import IdentityError, Unauthenticated
from vendor_portal.models.authz import User, TokenBlocklist
from vendor_portal.services.policy import compute_effective_permissions

log = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return (email or '').strip().lower()


def validate_password(password: Optional[str]):
    min_len = current_app.config.get('MIN_PASSWORD_LENGTH', 6)
    if not password or len(password) < min_len:
        raise IdentityError('weak-password', f'password must be at least {min_len} characters')


def get_account(user_id: int) -> Optional[User]:
    return get_db().execute(select(User).where(User.id==user_id)).scalar_one_or_none()


def create_account(email: str, password: str, name: Optional[str] = None) -> User:
    email = _normalize_email(email)
    if not email:
        raise IdentityError('invalid-email', 'email required')
    validate_password(password)
    session = get_db()
    if session.execute(select(User).where(User.email==email)).scalar_one_or_none():
        raise IdentityError('email-already-in-use', 'email already registered')
    user = User(name=name or email.split('@')[0], email=email, password_hash='')
    user.set_password(password)
    session.add(user); session.flush()
    return user


def sign_in(email: str, password: str) -> User:
    user = get_db().execute(select(User).where(User.email==_normalize_email(email))).scalar_one_or_none()
    if not user or not user.is_active or not user.verify_password(password or ''):
        raise IdentityError('invalid-credential', 'invalid credentials')
    return user


def issue_token(user: User, vendor_id: Optional[int] = None) -> str:
    eff = compute_effective_permissions(user.id)
    claims = {
        'roles': eff['roles'],
        'perms': eff['perms'],
        'vendor_id': vendor_id,
    }
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    return create_access_token(identity=str(user.id), additional_claims=claims)


def current_identity() -> Optional[User]:
    verify_jwt_in_request(optional=True)
    ident = get_jwt_identity()
    if ident is None:
        return None
    return get_account(int(ident))


def sign_out():
    """Revoke the token carried by the current request."""
    claims = get_jwt()
    session = get_db()
    if not is_token_revoked(claims['jti']):
        session.add(TokenBlocklist(jti=claims['jti'], user_id=int(claims['sub'])))
        session.commit()
    log.info('account %s signed out', claims['sub'])


def is_token_revoked(jti: str) -> bool:
    return get_db().execute(select(TokenBlocklist.id).where(TokenBlocklist.jti==jti)).first() is not None


def reauthenticate(email: str, password: str) -> User:
    """Confirm the current identity's credentials before a sensitive change."""
    user = current_identity()
    if user is None:
        raise Unauthenticated('no active session')
    if _normalize_email(email) != user.email or not user.verify_password(password or ''):
        raise IdentityError('invalid-credential', 'current credentials do not match')
    return user


def change_password(user: User, new_password: str):
    validate_password(new_password)
    user.set_password(new_password)
    get_db().commit()


def change_email(user: User, new_email: str) -> User:
    """Point the account at a new login email; caller commits."""
    new_email = _normalize_email(new_email)
    if new_email == user.email:
        return user
    if get_db().execute(select(User).where(User.email==new_email)).scalar_one_or_none():
        raise IdentityError('email-already-in-use', 'email already registered')
    user.email = new_email
    return user


def reset_password(user_id: int, new_password: str) -> User:
    """Administrative reset that does not require the old password."""
    user = get_account(user_id)
    if user is None:
        raise IdentityError('account-not-found', 'identity account not found')
    change_password(user, new_password)
    log.info('password reset for account %s', user_id)
    return user
