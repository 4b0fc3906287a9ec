from __future__ import annotations
from typing import Any, Dict, List, Optional
from flask_jwt_extended import get_jwt
from sqlalchemy import select
from vendor_portal import get_db
from vendor_portal.models.audit import AuditLog


def _request_claims() -> Dict[str, Any]:
    try:
        return get_jwt() or {}
    except RuntimeError:
        # outside a verified request (seed scripts, shell)
        return {}


def add_audit(action: str, entity: Optional[str] = None, entity_id: Any = None, meta: Optional[Dict[str, Any]] = None) -> AuditLog:
    """Stage an audit entry in the current session; the caller commits.

    The actor and a snapshot of its permission claims come from the verified JWT, if any.
    """
    claims = _request_claims()
    sub = claims.get('sub')
    entry = AuditLog(
        actor_user_id=int(sub) if sub is not None else 0,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        perms_snapshot={'perms': claims.get('perms', [])},
        meta=dict(meta or {}),
    )
    get_db().add(entry)
    return entry


def entity_history(entity: str, entity_id: Any, limit: int = 50) -> List[AuditLog]:
    q = (
        select(AuditLog)
        .where(AuditLog.entity==entity, AuditLog.entity_id==str(entity_id))
        .order_by(AuditLog.id.desc())
        .limit(limit)
    )
    return list(get_db().execute(q).scalars())
