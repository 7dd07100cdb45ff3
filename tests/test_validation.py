"""Tests for gmail_tools/validation.py"""

import pytest

from gmail_tools.validation import is_safe_filename, sanitize_input, validate_email


class TestValidateEmail:
    """Tests for the email address format check."""

    @pytest.mark.parametrize("address", [
        "a@b.co",
        "first.last@example.com",
        "user+tag@mail.example.org",
        "a@b.c.d",
    ])
    def test_accepts_well_formed(self, address):
        assert validate_email(address) is True

    @pytest.mark.parametrize("address", [
        "not-an-email",
        "a@b",
        "@b.co",
        "a@.co",
        "a b@c.co",
        "a@@b.co",
        "",
        "a@b.co\n",
    ])
    def test_rejects_malformed(self, address):
        assert validate_email(address) is False

    def test_rejects_non_strings(self):
        assert validate_email(None) is False
        assert validate_email(42) is False


class TestSanitizeInput:
    """Tests for angle-bracket stripping."""

    def test_strips_brackets_and_trims(self):
        assert sanitize_input("<script>x</script>  ") == "scriptx/script"

    def test_leaves_plain_text_alone(self):
        assert sanitize_input("from:boss@example.com is:unread") == "from:boss@example.com is:unread"

    def test_trims_leading_whitespace(self):
        assert sanitize_input("  \t<b>hi</b>\n") == "bhi/b"

    def test_only_brackets_becomes_empty(self):
        assert sanitize_input("<<>>") == ""


class TestIsSafeFilename:
    """Tests for the download filename guard."""

    @pytest.mark.parametrize("name", ["report.pdf", "photo 1.jpg", "..hidden", "a..b.txt"])
    def test_accepts_bare_names(self, name):
        assert is_safe_filename(name) is True

    @pytest.mark.parametrize("name", [
        "",
        ".",
        "..",
        "../evil.sh",
        "sub/dir.txt",
        "/etc/passwd",
        "..\\windows.ini",
        "nul\x00byte",
    ])
    def test_rejects_paths(self, name):
        assert is_safe_filename(name) is False
