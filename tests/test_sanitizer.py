"""
Tests for InputSanitizer.

Property 1: XSS escaping
- Escaped output never contains raw markup characters

Property 2: Robustness
- Both sanitizers survive the fuzz engine without a single failure
"""

import html

import pytest
from hypothesis import given, settings, strategies as st

from secaudit import sanitizer
from secaudit.sanitizer import InputSanitizer
from secaudit.testers.fuzz_engine import FuzzConfig, FuzzEngine


@pytest.fixture
def sanitizer_instance():
    return InputSanitizer()


class TestSanitizerProperties:

    @given(st.text(max_size=200))
    @settings(max_examples=100)
    def test_xss_output_has_no_markup(self, value):
        """Property 1."""
        escaped = InputSanitizer().sanitize_for_xss(value)
        for char in "<>\"'":
            assert char not in escaped

    @given(st.text(min_size=1, max_size=200))
    @settings(max_examples=100)
    def test_xss_matches_html_escape(self, value):
        assert InputSanitizer().sanitize_for_xss(value) == html.escape(value, quote=True)

    @pytest.mark.parametrize("target", [sanitizer.sanitize_for_sql, sanitizer.sanitize_for_xss])
    def test_survives_fuzzing(self, target):
        """Property 2."""
        findings = FuzzEngine().run(target, FuzzConfig(iterations=200, seed=7))
        assert findings == []


class TestSqlSanitizer:

    @pytest.mark.parametrize("value", [
        "' OR '1'='1",
        "admin' --",
        "'; DROP TABLE users; --",
        "1 UNION SELECT password FROM users",
        "x /* comment */",
    ])
    def test_rejects_injection(self, sanitizer_instance, value):
        assert sanitizer_instance.sanitize_for_sql(value) == ""

    def test_escapes_quotes(self, sanitizer_instance):
        assert sanitizer_instance.sanitize_for_sql("O'Brien") == "O''Brien"

    def test_passes_plain_text(self, sanitizer_instance):
        assert sanitizer_instance.sanitize_for_sql("hello world") == "hello world"

    def test_empty_and_none(self, sanitizer_instance):
        assert sanitizer_instance.sanitize_for_sql("") == ""
        assert sanitizer_instance.sanitize_for_sql(None) is None


class TestXssSanitizer:

    def test_script_tag(self, sanitizer_instance):
        assert (
            sanitizer_instance.sanitize_for_xss("<script>alert('x')</script>")
            == "&lt;script&gt;alert(&#x27;x&#x27;)&lt;/script&gt;"
        )

    def test_ampersand_escaped_once(self, sanitizer_instance):
        assert sanitizer_instance.sanitize_for_xss('a & "b"') == "a &amp; &quot;b&quot;"

    def test_empty_and_none(self, sanitizer_instance):
        assert sanitizer_instance.sanitize_for_xss("") == ""
        assert sanitizer_instance.sanitize_for_xss(None) is None


class TestValidators:

    @pytest.mark.parametrize("value, expected", [
        ("abc123", True),
        ("abc 123", False),
        ("", False),
        (None, False),
    ])
    def test_is_alphanumeric(self, sanitizer_instance, value, expected):
        assert sanitizer_instance.is_alphanumeric(value) is expected

    @pytest.mark.parametrize("value, expected", [
        ("user@example.com", True),
        ("first.last@sub.example.org", True),
        ("user@", False),
        ("not an email", False),
        (None, False),
    ])
    def test_is_valid_email(self, sanitizer_instance, value, expected):
        assert sanitizer_instance.is_valid_email(value) is expected

    @pytest.mark.parametrize("value, expected", [
        ("https://example.com/path/to", True),
        ("http://localhost:8080", True),
        ("ftp://files.example.com/a.txt", True),
        ("javascript:alert(1)", False),
        (None, False),
    ])
    def test_is_valid_url(self, sanitizer_instance, value, expected):
        assert sanitizer_instance.is_valid_url(value) is expected

    def test_trim_input(self, sanitizer_instance):
        assert sanitizer_instance.trim_input("  padded \n") == "padded"
        assert sanitizer_instance.trim_input(None) is None


class TestSanitizeInput:

    @pytest.mark.parametrize("context, expected", [
        ("SQL", "it''s"),
        ("sql", "it''s"),
        ("XSS", "it&#x27;s"),
        ("TRIM", "it's"),
        ("UNKNOWN", " it's "),
    ])
    def test_contexts(self, sanitizer_instance, context, expected):
        value = " it's " if context in ("TRIM", "UNKNOWN") else "it's"
        assert sanitizer_instance.sanitize_input(value, context) == expected

    def test_none_passthrough(self, sanitizer_instance):
        assert sanitizer_instance.sanitize_input(None, "SQL") is None
        assert sanitizer_instance.sanitize_input("x", None) == "x"
