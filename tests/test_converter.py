"""Tests for MIME families, extension lookup and text conversions."""

import json

import pytest

from common.exceptions import ConversionUnsupportedError
from converter import conversion_targets, convert, supported_conversions
from converter.mime import can_convert, extension_to_mime_type, family_of
from converter.text import TEXT_CONVERSIONS, convert_text, escape_html, strip_html


class TestMimeFamilies:
    """Test family classification and the family-level check."""

    def test_family_of(self):
        assert family_of("text/markdown") == "text"
        assert family_of("application/json") == "text"
        assert family_of("image/webp") == "image"
        assert family_of("text/xml") is None

    @pytest.mark.parametrize("from_type,to_type", [
        ("text/plain", "text/plain"),
        ("text/markdown", "text/html"),
        ("application/json", "text/css"),
        ("image/png", "image/jpeg"),
        ("text/plain; charset=utf-8", "text/html"),
        ("text/xml", "text/xml"),
    ])
    def test_can_convert_true(self, from_type, to_type):
        assert can_convert(from_type, to_type)

    @pytest.mark.parametrize("from_type,to_type", [
        ("text/plain", "image/png"),
        ("image/gif", "application/json"),
        ("text/xml", "text/plain"),
    ])
    def test_can_convert_false(self, from_type, to_type):
        assert not can_convert(from_type, to_type)


class TestExtensionLookup:
    """Test extension to MIME type mapping."""

    @pytest.mark.parametrize("extension,expected", [
        (".txt", "text/plain"),
        (".md", "text/markdown"),
        (".HTML", "text/html"),
        ("json", "application/json"),
        (".jpg", "image/jpeg"),
        (".jpeg", "image/jpeg"),
        (".avif", "image/avif"),
    ])
    def test_known_extensions(self, extension, expected):
        assert extension_to_mime_type(extension) == expected

    def test_unknown_extension(self):
        assert extension_to_mime_type(".exe") == "unknown"
        assert extension_to_mime_type("") == "unknown"


class TestConversionTable:
    """Test table shape and enumeration."""

    def test_every_text_pair_present(self):
        assert len(TEXT_CONVERSIONS) == 6 * 5
        assert ("text/css", "text/javascript") in TEXT_CONVERSIONS
        assert ("text/javascript", "text/css") in TEXT_CONVERSIONS

    def test_supported_conversions_enumerates_both_families(self):
        pairs = supported_conversions()

        assert ("text/markdown", "text/html") in pairs
        assert ("image/png", "image/webp") in pairs
        assert all(source != target for source, target in pairs)
        assert len(pairs) == len(TEXT_CONVERSIONS) + 5 * 4

    def test_conversion_targets(self):
        assert "text/html" in conversion_targets("text/markdown")
        assert "text/markdown" in conversion_targets("text/markdown")
        assert conversion_targets("image/gif") == sorted(["image/png", "image/jpeg", "image/webp", "image/avif", "image/gif"])
        assert conversion_targets("text/xml") == ["text/xml"]


class TestTextConversions:
    """Test individual text transforms."""

    def test_markdown_to_html(self):
        result = convert(b"# Title", "text/markdown", "text/html")
        assert b"<h1>Title</h1>" in result

    def test_markdown_to_plain(self):
        result = convert(b"# Title\n\nSome **bold** text", "text/markdown", "text/plain").decode()
        assert result == "Title\nSome bold text"

    def test_plain_to_html_escapes(self):
        result = convert(b"<b>&'\"", "text/plain", "text/html").decode()

        assert "<pre>&lt;b&gt;&amp;&#39;&quot;</pre>" in result
        assert result.startswith("<!DOCTYPE html>")

    def test_plain_to_markdown_short_and_long(self):
        assert convert(b"short", "text/plain", "text/markdown") == b"short"
        assert convert(b"line one\nline two", "text/plain", "text/markdown") == b"```\nline one\nline two\n```"

    def test_html_to_plain_strips_scripts_and_entities(self):
        source = b"<html><script>alert(1)</script><style>p{}</style><p>Tom &amp; Jerry</p></html>"
        assert convert(source, "text/html", "text/plain") == b"Tom & Jerry"

    def test_html_to_markdown(self):
        source = b"<h1>Title</h1><p>Some <strong>bold</strong> and <em>soft</em></p>"
        result = convert(source, "text/html", "text/markdown").decode()
        assert result == "# Title\n\nSome **bold** and *soft*"

    def test_json_to_plain_pretty_prints(self):
        result = convert(b'{"a":1,"b":[1,2]}', "application/json", "text/plain").decode()
        assert result == json.dumps({"a": 1, "b": [1, 2]}, indent=2)

    def test_invalid_json_to_plain_passes_through(self):
        assert convert(b"{not json", "application/json", "text/plain") == b"{not json"

    def test_json_to_markdown_fenced(self):
        result = convert(b'{"a":1,"b":"x"}', "application/json", "text/markdown").decode()
        assert result == '```json\n{\n  "a": 1,\n  "b": "x"\n}\n```'
        assert "&quot;" not in result

    def test_json_to_js(self):
        result = convert(b'{"a":1}', "application/json", "text/javascript").decode()
        assert result == 'const data = {\n  "a": 1\n};'

    def test_json_to_css_comment(self):
        assert convert(b'{"a": 1}', "application/json", "text/css") == b'/* {"a":1} */'

    def test_text_to_json_string(self):
        assert convert(b'say "hi"', "text/plain", "application/json") == b'"say \\"hi\\""'

    def test_css_to_html_wraps_style(self):
        result = convert(b"p > a {}", "text/css", "text/html").decode()
        assert "<style>p &gt; a {}</style>" in result

    def test_js_to_markdown_fence(self):
        assert convert(b"let x;", "text/javascript", "text/markdown") == b"```javascript\nlet x;\n```"

    def test_plain_to_js_comment(self):
        assert convert(b"a\nb", "text/plain", "text/javascript") == b"// a\n// b"

    def test_plain_to_css_comment_closes_safely(self):
        assert convert(b"a */ b", "text/plain", "text/css") == b"/* a * / b */"

    def test_identity_returns_original_bytes(self):
        data = b"\xff not utf-8"
        assert convert(data, "text/plain", "text/plain; charset=utf-8") is data

    def test_css_and_js_wrap_as_comment(self):
        assert convert(b"a{}", "text/css", "text/javascript") == b"/* a{} */"
        assert convert(b"let a = 1;", "text/javascript", "text/css") == b"/* let a = 1; */"

    def test_missing_pair_raises(self):
        with pytest.raises(ConversionUnsupportedError) as exc_info:
            convert_text(b"<a/>", "text/xml", "text/plain")

        assert exc_info.value.from_type == "text/xml"
        assert exc_info.value.to_type == "text/plain"
        assert "Unsupported text conversion from text/xml to text/plain" in str(exc_info.value)

    def test_cross_family_raises_naming_both_types(self):
        with pytest.raises(ConversionUnsupportedError) as exc_info:
            convert(b"x", "text/plain", "image/png")

        assert str(exc_info.value) == "Conversion from text/plain to image/png is not supported"

    def test_invalid_utf8_is_replaced(self):
        result = convert_text(b"caf\xe9", "text/plain", "application/json").decode()
        assert result == "\"caf\ufffd\""


class TestTextHelpers:
    """Test escaping and stripping helpers."""

    def test_escape_html(self):
        assert escape_html("<a href='x'>&</a>") == "&lt;a href=&#39;x&#39;&gt;&amp;&lt;/a&gt;"

    def test_strip_html_collapses_blank_runs(self):
        assert strip_html("<p>a</p>\n\n\n\n<p>b&nbsp;c</p>") == "a\n\nb c"
