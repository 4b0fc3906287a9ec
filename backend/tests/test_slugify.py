import pytest
from vendor_portal.utils.slugify import slugify, generate_vendor_slug


@pytest.mark.parametrize('text,expected', [
    ('Hello World', 'hello-world'),
    ('  Multiple   Spaces  ', 'multiple-spaces'),
    ('Tea & Coffee!', 'tea-coffee'),
    ('--Leading and trailing--', 'leading-and-trailing'),
    ('snake_case_name', 'snake_case_name'),
    ('Café Noir', 'caf-noir'),
    ('متجر النيل', 'متجر-النيل'),
    ('', ''),
])
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_vendor_slug_uses_name():
    assert generate_vendor_slug('Nile Crafts 2') == 'nile-crafts-2'
