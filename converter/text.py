"""Pairwise conversions between text-family MIME types.

The table is explicit: every ordered pair of the six text-family types has an
entry. A source or target outside those types (e.g. text/xml) raises
ConversionUnsupportedError.
"""

import html
import json
import re
from typing import Callable, Dict, Tuple

from markdown_it import MarkdownIt

from common.exceptions import ConversionUnsupportedError
from common.logging_config import get_logger
from common.utils import base_mime_type

logger = get_logger(__name__)

PLAIN = "text/plain"
HTML = "text/html"
CSS = "text/css"
JS = "text/javascript"
MARKDOWN = "text/markdown"
JSON = "application/json"

TextTransform = Callable[[str], str]

_md = MarkdownIt()

_HTML_SHELL = '<!DOCTYPE html><html><head><meta charset="utf-8"></head><body>{body}</body></html>'

_SCRIPT_RE = re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r'<style[^>]*>.*?</style>', re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r'<[^>]*>')
_BLANK_RUN_RE = re.compile(r'\n\s*\n\s*\n')
_BLANK_PAIR_RE = re.compile(r'\n\s*\n')

_MARKDOWN_RULES = [
    (re.compile(r'<h1[^>]*>(.*?)</h1>', re.IGNORECASE), r'# \1\n\n'),
    (re.compile(r'<h2[^>]*>(.*?)</h2>', re.IGNORECASE), r'## \1\n\n'),
    (re.compile(r'<h3[^>]*>(.*?)</h3>', re.IGNORECASE), r'### \1\n\n'),
    (re.compile(r'<strong[^>]*>(.*?)</strong>', re.IGNORECASE), r'**\1**'),
    (re.compile(r'<b(?:\s[^>]*)?>(.*?)</b>', re.IGNORECASE), r'**\1**'),
    (re.compile(r'<em[^>]*>(.*?)</em>', re.IGNORECASE), r'*\1*'),
    (re.compile(r'<i(?:\s[^>]*)?>(.*?)</i>', re.IGNORECASE), r'*\1*'),
    (re.compile(r'<pre[^>]*>(.*?)</pre>', re.IGNORECASE | re.DOTALL), r'```\n\1\n```'),
    (re.compile(r'<code[^>]*>(.*?)</code>', re.IGNORECASE), r'`\1`'),
]


def escape_html(text: str) -> str:
    """Escape &, <, >, double and single quotes."""
    return html.escape(text, quote=True).replace('&#x27;', '&#39;')


def html_document(body: str) -> str:
    return _HTML_SHELL.format(body=body)


def strip_html(text: str) -> str:
    """
    Drop script and style blocks and all tags, then decode entities.
    """
    text = _SCRIPT_RE.sub('', text)
    text = _STYLE_RE.sub('', text)
    text = _TAG_RE.sub('', text)
    text = html.unescape(text).replace('\xa0', ' ')
    return _BLANK_RUN_RE.sub('\n\n', text).strip()


def css_comment(text: str) -> str:
    return f"/* {text.replace('*/', '* /')} */"


def js_comment(text: str) -> str:
    return '// ' + text.replace('\n', '\n// ')


def fenced(text: str, lang: str = '') -> str:
    return f"```{lang}\n{text}\n```"


def _render_markdown(text: str) -> str:
    return _md.render(text)


def _markdown_to_plain(text: str) -> str:
    plain = _TAG_RE.sub('', _render_markdown(text))
    plain = html.unescape(plain).replace('\xa0', ' ')
    return _BLANK_PAIR_RE.sub('\n\n', plain).strip()


def _plain_to_html(text: str) -> str:
    return html_document(f"<pre>{escape_html(text)}</pre>")


def _plain_to_markdown(text: str) -> str:
    if '\n' in text or len(text) > 50:
        return fenced(text)
    return text


def _html_to_markdown(text: str) -> str:
    text = _SCRIPT_RE.sub('', text)
    text = _STYLE_RE.sub('', text)
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    text = _TAG_RE.sub('', text)
    text = html.unescape(text).replace('\xa0', ' ')
    return _BLANK_RUN_RE.sub('\n\n', text).strip()


def _json_string(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _parse_json(text: str):
    """Return the parsed document, or raise ValueError."""
    return json.loads(text)


def _json_to_plain(text: str) -> str:
    try:
        return json.dumps(_parse_json(text), indent=2, ensure_ascii=False)
    except ValueError:
        return text


def _json_to_html(text: str) -> str:
    return html_document(f"<pre>{escape_html(_json_to_plain(text))}</pre>")


def _json_to_markdown(text: str) -> str:
    return fenced(_json_to_plain(text), 'json')


def _json_to_css(text: str) -> str:
    try:
        compact = json.dumps(_parse_json(text), separators=(',', ':'), ensure_ascii=False)
    except ValueError:
        compact = text
    return css_comment(compact)


def _json_to_js(text: str) -> str:
    try:
        document = _parse_json(text)
    except ValueError:
        return js_comment(text)
    return f"const data = {json.dumps(document, indent=2, ensure_ascii=False)};"


def _source_to_html(tag: str) -> TextTransform:
    def transform(text: str) -> str:
        return html_document(f"<{tag}>{escape_html(text)}</{tag}>")
    return transform


def _identity(text: str) -> str:
    return text


TEXT_CONVERSIONS: Dict[Tuple[str, str], TextTransform] = {
    (MARKDOWN, HTML): _render_markdown,
    (MARKDOWN, PLAIN): _markdown_to_plain,
    (MARKDOWN, JSON): _json_string,
    (MARKDOWN, CSS): lambda text: css_comment(_markdown_to_plain(text)),
    (MARKDOWN, JS): lambda text: js_comment(_markdown_to_plain(text)),

    (PLAIN, HTML): _plain_to_html,
    (PLAIN, MARKDOWN): _plain_to_markdown,
    (PLAIN, JSON): _json_string,
    (PLAIN, CSS): css_comment,
    (PLAIN, JS): js_comment,

    (HTML, PLAIN): strip_html,
    (HTML, MARKDOWN): _html_to_markdown,
    (HTML, JSON): _json_string,
    (HTML, CSS): lambda text: css_comment(strip_html(text)),
    (HTML, JS): lambda text: js_comment(strip_html(text)),

    (CSS, PLAIN): _identity,
    (CSS, JSON): _json_string,
    (CSS, HTML): _source_to_html('style'),
    (CSS, MARKDOWN): lambda text: fenced(text, 'css'),
    (CSS, JS): css_comment,

    (JS, PLAIN): _identity,
    (JS, JSON): _json_string,
    (JS, HTML): _source_to_html('script'),
    (JS, MARKDOWN): lambda text: fenced(text, 'javascript'),
    (JS, CSS): css_comment,

    (JSON, PLAIN): _json_to_plain,
    (JSON, HTML): _json_to_html,
    (JSON, MARKDOWN): _json_to_markdown,
    (JSON, CSS): _json_to_css,
    (JSON, JS): _json_to_js,
}


def convert_text(data: bytes, from_type: str, to_type: str) -> bytes:
    """
    Convert text payload between two text-family types.

    Args:
        data: UTF-8 encoded source payload
        from_type: Source MIME type
        to_type: Target MIME type

    Returns:
        UTF-8 encoded converted payload (the original bytes for identical types)

    Raises:
        ConversionUnsupportedError: If the pair is not in TEXT_CONVERSIONS
    """
    source = base_mime_type(from_type)
    target = base_mime_type(to_type)
    if source == target:
        return data

    transform = TEXT_CONVERSIONS.get((source, target))
    if transform is None:
        raise ConversionUnsupportedError(
            from_type,
            to_type,
            f"Unsupported text conversion from {source} to {target}",
        )

    logger.debug(f"Converting text fragment [from={source}, to={target}, size={len(data)}]")
    text = bytes(data).decode('utf-8', errors='replace')
    return transform(text).encode('utf-8')
