import pytest

from clinic_api.common.utils.search import contains_pattern


@pytest.mark.parametrize("term,expected", [
    ("john", "%john%"),
    ("  emily ", "%emily%"),
    ("100%", "%100\\%%"),
    ("a_b", "%a\\_b%"),
    ("c:\\x", "%c:\\\\x%"),
])
def test_contains_pattern_escapes_wildcards(term, expected):
    assert contains_pattern(term) == expected
