"""Email helper tests."""

import pytest

from account_service.utils.email import is_valid_email_format, normalize_email


class TestNormalizeEmail:
    def test_lowercases_and_trims(self):
        assert normalize_email("  Alice@Example.COM ") == "alice@example.com"

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert normalize_email(value) == ""


class TestIsValidEmailFormat:
    @pytest.mark.parametrize(
        "email",
        ["user@example.com", "user+tag@example.co.uk", "first.last@sub.domain.org"],
    )
    def test_valid(self, email):
        assert is_valid_email_format(email) is True

    @pytest.mark.parametrize(
        "email",
        ["", None, "plain", "missing@tld", "@example.com", "a b@example.com"],
    )
    def test_invalid(self, email):
        assert is_valid_email_format(email) is False
