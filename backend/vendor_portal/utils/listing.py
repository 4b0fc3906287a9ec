from __future__ import annotations
"""Query helpers for the admin list endpoints: filtering, sorting, paging and ETags.

Page size defaults come from ``LIST_DEFAULT_LIMIT`` / ``LIST_MAX_LIMIT`` in the app config.
"""
from typing import Any, Callable, Dict, Iterable, Optional, Tuple
from flask import request, abort, make_response, current_app
from sqlalchemy.orm import Query
import hashlib

FilterSpec = Dict[str, Any]


def normalize_pagination(limit_raw, offset_raw, default_limit: int = 50, max_limit: int = 200) -> Tuple[int, int]:
    try:
        limit = int(limit_raw) if limit_raw is not None else default_limit
        offset = int(offset_raw) if offset_raw is not None else 0
    except ValueError:
        raise ValueError('limit/offset must be int')
    return max(1, min(limit, max_limit)), max(0, offset)


def apply_filters(query, specs: Dict[str, FilterSpec], params):
    """Apply ``specs`` for every query parameter present.

    specs: { param: { 'op': callable(query, value) -> query, 'coerce': callable (optional) } }
    """
    for name, meta in specs.items():
        raw = params.get(name)
        if raw is None or raw == '':
            continue
        coerce: Optional[Callable] = meta.get('coerce')
        if coerce:
            try:
                raw = coerce(raw)
            except (TypeError, ValueError):
                abort(400, description=f'{name} invalid')
        query = meta['op'](query, raw)
    return query


def apply_multi_sort(query, sort_expr: Optional[str], allowed: dict, tie_breaker):
    """Order by comma separated keys (``-`` prefix for descending); ``tie_breaker`` keeps pages stable."""
    clauses = []
    for token in (sort_expr or '').split(','):
        token = token.strip()
        if not token:
            continue
        key = token.lstrip('-')
        col = allowed.get(key)
        if col is None:
            abort(400, description=f'Invalid sort field {key}')
        clauses.append(col.desc() if token.startswith('-') else col.asc())
    clauses.append(tie_breaker.asc())
    return query.order_by(*clauses)


def apply_pagination(q: Query) -> Tuple[Query, int, int, int]:
    cfg = current_app.config
    try:
        limit, offset = normalize_pagination(
            request.args.get('limit'), request.args.get('offset'),
            cfg.get('LIST_DEFAULT_LIMIT', 50), cfg.get('LIST_MAX_LIMIT', 200),
        )
    except ValueError as e:
        abort(400, description=str(e))
    total = q.count()
    return q.offset(offset).limit(limit), total, limit, offset


def compute_etag(rows: Iterable[dict], total: int, limit: int, offset: int) -> str:
    """ETag over the page contents; counters change the tag even when ids do not."""
    seed = f"{list(rows)!r}|{total}|{limit}|{offset}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]


def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }


def make_cached_list_response(rows: list, total: int, limit: int, offset: int):
    """Return a list response carrying an ETag, or 304 when If-None-Match matches."""
    etag = compute_etag(rows, total, limit, offset)
    inm: Optional[str] = request.headers.get('If-None-Match')
    if inm and inm.strip('"') == etag:
        resp = make_response('', 304)
    else:
        resp = make_response(build_list_payload(rows, total, limit, offset))
    resp.headers['ETag'] = etag
    return resp


__all__ = [
    'normalize_pagination', 'apply_filters', 'apply_multi_sort', 'apply_pagination',
    'compute_etag', 'build_list_payload', 'make_cached_list_response',
]
