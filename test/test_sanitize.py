"""
Tests for input sanitization utilities

Tests key normalization used before consent lookups.
"""

import pytest

from consent_log.utils.sanitize import sanitize_text_field


class TestTextFieldSanitization:
    """Test sanitize_text_field()"""

    def test_trims_whitespace(self):
        assert sanitize_text_field("  test@test.gr  ") == "test@test.gr"

    def test_strips_tags(self):
        assert sanitize_text_field("<b>form_1</b>") == "form_1"

    def test_drops_script_content(self):
        assert sanitize_text_field("<script>alert('xss')</script>form_1") == "form_1"

    def test_removes_line_breaks_and_tabs(self):
        assert sanitize_text_field("form\n1\tb") == "form 1 b"

    def test_removes_control_characters(self):
        assert sanitize_text_field("form\x00_1\x07") == "form_1"

    def test_removes_percent_encoded_octets(self):
        assert sanitize_text_field("form%0A_1") == "form_1"

    def test_removes_nested_octets(self):
        assert sanitize_text_field("form_%%3C3C1") == "form_1"

    def test_keeps_plain_ampersand(self):
        assert sanitize_text_field("tom&jerry@example.com") == "tom&jerry@example.com"

    @pytest.mark.parametrize("value,expected", [(None, ""), (42, "42"), ("", "")])
    def test_non_string_input(self, value, expected):
        assert sanitize_text_field(value) == expected

    def test_is_stable_for_plain_identifiers(self):
        once = sanitize_text_field("  user@example.com ")
        assert sanitize_text_field(once) == once

    def test_strips_entity_encoded_tags(self):
        assert sanitize_text_field("&lt;b&gt;form_1&lt;/b&gt;") == "form_1"

    def test_drops_entity_encoded_script_content(self):
        assert sanitize_text_field("&lt;script&gt;alert(1)&lt;/script&gt;form_1") == "form_1"

    def test_strips_double_encoded_tags(self):
        assert sanitize_text_field("&amp;lt;b&amp;gt;form_1&amp;lt;/b&amp;gt;") == "form_1"

    def test_strips_tag_split_by_percent_octet(self):
        assert sanitize_text_field("&lt;%3Cb&gt;form_1&lt;/b&gt;") == "form_1"

    def test_keeps_lone_angle_bracket(self):
        assert sanitize_text_field("a < b") == "a < b"

    @pytest.mark.parametrize(
        "value",
        [
            "&lt;b&gt;form_1&lt;/b&gt;",
            "&amp;lt;i&amp;gt;x&amp;lt;/i&amp;gt;",
            "&lt;%3Cb&gt;form_1&lt;/b&gt;",
            "%26lt;b%26gt;form_1",
            "tom&amp;jerry@example.com",
            "a &lt; b",
        ],
    )
    def test_is_stable_for_encoded_markup(self, value):
        once = sanitize_text_field(value)
        assert sanitize_text_field(once) == once
        assert "<b>" not in once and "<i>" not in once
