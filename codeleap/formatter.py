# codeleap/formatter.py

"""
Line/token heuristics that re-indent HTML, CSS and JavaScript-like snippets.

No parsing happens here: braces and tags are counted, nothing more. The JS
rules count braces inside strings and comments too (`"{"` opens a block as far
as this module is concerned).
"""

import logging
import re
from typing import List

from .schemas import Language, normalize_language

logger = logging.getLogger(__name__)

INDENT = "  "

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

_BETWEEN_TAGS_RE = re.compile(r">\s+<")
_WHITESPACE_RE = re.compile(r"\s+")
_TAG_SPLIT_RE = re.compile(r"(<[^>]*>)")
_TAG_NAME_RE = re.compile(r"<(\w+)")

_CSS_OPEN_RE = re.compile(r"\s*\{\s*")
_CSS_SEMI_RE = re.compile(r";\s*")
_CSS_CLOSE_RE = re.compile(r"\s*\}\s*")
_BLANK_LINES_RE = re.compile(r"\n\s*\n")


def _emit(lines: List[str], depth: int, text: str) -> None:
    lines.append(INDENT * depth + text)


def _finish(lines: List[str]) -> str:
    # Leading/trailing blank lines go; the first kept line always sits at depth 0.
    return "\n".join(lines).strip()


def format_html(html: str) -> str:
    if not html or not html.strip():
        return html

    clean = _BETWEEN_TAGS_RE.sub("><", html)
    clean = _WHITESPACE_RE.sub(" ", clean).strip()

    lines: List[str] = []
    depth = 0
    for raw in _TAG_SPLIT_RE.split(clean):
        part = raw.strip()
        if not part:
            continue

        if part.startswith("</"):
            depth = max(0, depth - 1)
            _emit(lines, depth, part)
        elif part.startswith("<!") or part.startswith("<?"):
            # doctype, comments, processing instructions never open a block
            _emit(lines, depth, part)
        elif part.startswith("<"):
            m = _TAG_NAME_RE.match(part)
            tag = m.group(1).lower() if m else ""
            _emit(lines, depth, part)
            if not (part.endswith("/>") or tag in VOID_ELEMENTS):
                depth += 1
        else:
            _emit(lines, depth, part)

    return _finish(lines)


def format_css(css: str) -> str:
    if not css or not css.strip():
        return css

    clean = _CSS_OPEN_RE.sub(" {\n", css)
    clean = _CSS_SEMI_RE.sub(";\n", clean)
    clean = _CSS_CLOSE_RE.sub("\n}\n", clean)
    clean = _BLANK_LINES_RE.sub("\n", clean).strip()

    lines: List[str] = []
    depth = 0
    for line in clean.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        if stripped == "}":
            depth = max(0, depth - 1)
            _emit(lines, depth, stripped)
        elif stripped.endswith("{"):
            _emit(lines, depth, stripped)
            depth += 1
        else:
            _emit(lines, depth, stripped)

    return _finish(lines)


def format_javascript(js: str) -> str:
    if not js or not js.strip():
        return js

    lines: List[str] = []
    depth = 0
    for line in js.split("\n"):
        stripped = line.strip()
        if not stripped:
            lines.append("")
            continue
        if stripped.startswith("}"):
            depth = max(0, depth - 1)
        _emit(lines, depth, stripped)
        if stripped.endswith("{"):
            depth += 1

    return _finish(lines)


_FORMATTERS = {
    Language.HTML: format_html,
    Language.CSS: format_css,
    Language.JAVASCRIPT: format_javascript,
}


def format_code(code: str, language) -> str:
    """Re-indent `code` for `language`. Unknown languages and non-text input pass through untouched."""
    if not isinstance(code, str) or not code.strip():
        return code
    try:
        lang = normalize_language(language)
    except ValueError:
        logger.debug("No formatter for language %r; returning code unchanged", language)
        return code
    return _FORMATTERS[lang](code)
