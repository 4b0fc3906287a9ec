from __future__ import annotations
"""Domain error taxonomy.

Every refusal on a product mutation path maps to exactly one class here so the
caller can tell a quota block apart from an ownership problem or a store outage.
The app-wide error handler renders them as::

    {"error": {"status": 403, "title": "Forbidden", "code": "QUOTA_EXCEEDED",
               "detail": "...", "used": 5, "limit": 5}}
"""
from typing import Any, Dict, Optional


class PortalError(Exception):
    status = 400
    title = 'Bad Request'
    code = 'PORTAL_ERROR'

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def extra(self) -> Dict[str, Any]:
        return {}


class Unauthenticated(PortalError):
    status = 401
    title = 'Unauthorized'
    code = 'UNAUTHENTICATED'

    def __init__(self, detail: str = 'no active vendor session'):
        super().__init__(detail)


class OwnershipViolation(PortalError):
    status = 403
    title = 'Forbidden'
    code = 'OWNERSHIP_VIOLATION'

    def __init__(self, product_id: Any, detail: str = 'product belongs to another vendor'):
        super().__init__(detail)
        self.product_id = product_id

    def extra(self):
        return {'product_id': self.product_id}


class QuotaExceeded(PortalError):
    status = 403
    title = 'Forbidden'
    code = 'QUOTA_EXCEEDED'

    def __init__(self, action: str, used: int, limit: int):
        super().__init__(f'{action} limit reached ({used} of {limit} used)')
        self.action = action
        self.used = used
        self.limit = limit

    def extra(self):
        return {'action': self.action, 'used': self.used, 'limit': self.limit}


class MutationFailed(PortalError):
    code = 'MUTATION_FAILED'

    def __init__(self, operation: str, reason: str, detail: Optional[str] = None):
        super().__init__(detail or f'{operation} failed: {reason}')
        self.operation = operation
        self.reason = reason

    @property
    def status(self):  # type: ignore[override]
        return {'not-found': 404, 'permission-denied': 403}.get(self.reason, 502)

    @property
    def title(self):  # type: ignore[override]
        return {404: 'Not Found', 403: 'Forbidden'}.get(self.status, 'Bad Gateway')

    def extra(self):
        return {'operation': self.operation, 'reason': self.reason}


class CounterSyncFailed(PortalError):
    """Mutation succeeded but the usage counter could not be incremented.

    Never rendered to clients; the orchestrator logs it and reports success.
    """
    status = 500
    title = 'Internal Server Error'
    code = 'COUNTER_SYNC_FAILED'

    def __init__(self, vendor_id: int, counter: str, product_id: Any, cause: Optional[BaseException] = None):
        super().__init__(f'{counter} increment failed for vendor {vendor_id} after mutating product {product_id}')
        self.vendor_id = vendor_id
        self.counter = counter
        self.product_id = product_id
        self.cause = cause


class ConfirmationRequired(PortalError):
    status = 428
    title = 'Precondition Required'
    code = 'CONFIRMATION_REQUIRED'

    def __init__(self, prompt: Dict[str, Any]):
        super().__init__(f"confirm deletion of '{prompt.get('product_name')}'")
        self.prompt = prompt

    def extra(self):
        return {'confirmation': self.prompt}


class IdentityError(PortalError):
    """Identity provider refusal; ``reason`` mirrors the provider's error codes."""
    code = 'IDENTITY_ERROR'
    _STATUS = {
        'email-already-in-use': 409,
        'invalid-credential': 401,
        'weak-password': 400,
        'account-not-found': 404,
        'not-a-vendor': 403,
        'not-an-admin': 403,
    }

    def __init__(self, reason: str, detail: Optional[str] = None):
        super().__init__(detail or reason)
        self.reason = reason

    @property
    def status(self):  # type: ignore[override]
        return self._STATUS.get(self.reason, 400)

    @property
    def title(self):  # type: ignore[override]
        return {401: 'Unauthorized', 403: 'Forbidden', 404: 'Not Found', 409: 'Conflict'}.get(self.status, 'Bad Request')

    def extra(self):
        return {'reason': self.reason}


class StoreError(Exception):
    """Raised by the persistence services; ``reason`` is ``not-found`` or ``unavailable``."""

    def __init__(self, reason: str, detail: str = ''):
        super().__init__(detail or reason)
        self.reason = reason


__all__ = [
    'PortalError', 'Unauthenticated', 'OwnershipViolation', 'QuotaExceeded', 'MutationFailed',
    'CounterSyncFailed', 'ConfirmationRequired', 'IdentityError', 'StoreError',
]
