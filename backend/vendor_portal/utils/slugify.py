from __future__ import annotations
"""URL slugs for public vendor pages.

Arabic letters (U+0600 to U+06FF) are kept as-is so Arabic store names still
produce readable slugs.
"""
import re

_WHITESPACE = re.compile(r'\s+')
_DISALLOWED = re.compile(r'[^\w\u0600-\u06FF-]+', re.ASCII)
_HYPHENS = re.compile(r'-+')


def slugify(text: str) -> str:
    if not text:
        return ''
    slug = str(text).lower().strip()
    slug = _WHITESPACE.sub('-', slug)
    slug = _DISALLOWED.sub('', slug)
    slug = _HYPHENS.sub('-', slug)
    return slug.strip('-')


def generate_vendor_slug(vendor_name: str) -> str:
    return slugify(vendor_name)


__all__ = ['slugify', 'generate_vendor_slug']
