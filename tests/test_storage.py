import pytest

from clinic_api.common.utils.storage import safe_filename


@pytest.mark.parametrize("raw,expected", [
    ("receipt.pdf", "receipt.pdf"),
    ("../../etc/passwd", "passwd"),
    ("my bank receipt (1).pdf", "my_bank_receipt_1_.pdf"),
    ("", "upload"),
    ("...", "upload"),
])
def test_safe_filename(raw, expected):
    assert safe_filename(raw) == expected
