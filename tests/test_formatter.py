import pytest

from codeleap.formatter import format_code, format_css, format_html, format_javascript
from codeleap.schemas import Language


# ---------- HTML ----------
def test_html_void_element_does_not_indent() -> None:
    out = format_html('<img src="x.png"><p>hi</p>')
    assert out.split("\n") == ['<img src="x.png">', "<p>", "  hi", "</p>"]


def test_html_nesting_and_self_closing() -> None:
    out = format_html("<div><br/><span>a</span></div>")
    assert out == "<div>\n  <br/>\n  <span>\n    a\n  </span>\n</div>"


def test_html_doctype_and_comments_do_not_open_blocks() -> None:
    out = format_html("<!DOCTYPE html><html><!-- note --><body><p>x</p></body></html>")
    assert out.split("\n") == [
        "<!DOCTYPE html>",
        "<html>",
        "  <!-- note -->",
        "  <body>",
        "    <p>",
        "      x",
        "    </p>",
        "  </body>",
        "</html>",
    ]


def test_html_collapses_whitespace_in_text() -> None:
    out = format_html("<p>\n   hello     world\n</p>")
    assert out == "<p>\n  hello world\n</p>"


def test_html_unbalanced_tags_degrade_gracefully() -> None:
    out = format_html("<ul>\n  <li>Item 1</li>\n  <li>Item 2\n  <li>Item 3</li>\n</ul>")
    lines = out.split("\n")
    assert lines[0] == "<ul>"
    assert "    Item 2" in lines
    assert lines[-1] == "  </ul>"


def test_html_extra_closing_tags_never_go_negative() -> None:
    assert format_html("</div></div>hi") == "</div>\n</div>\nhi"


# ---------- CSS ----------
def test_css_minified_rule() -> None:
    assert format_css(".a{color:red;margin:0}") == ".a {\n  color:red;\n  margin:0\n}"


def test_css_nested_blocks() -> None:
    out = format_css("@keyframes f{from{opacity:0;}to{opacity:1;}}")
    assert out.split("\n") == [
        "@keyframes f {",
        "  from {",
        "    opacity:0;",
        "  }",
        "  to {",
        "    opacity:1;",
        "  }",
        "}",
    ]


def test_css_blank_lines_between_rules_collapse() -> None:
    out = format_css(".a {\n  color: red;\n}\n\n\n.b {\n  color: blue;\n}")
    assert out == ".a {\n  color: red;\n}\n.b {\n  color: blue;\n}"


# ---------- JavaScript ----------
def test_js_reindents_by_braces() -> None:
    src = "function f() {\nif (x) {\nreturn 1;\n} else {\nreturn 2;\n}\n}"
    assert format_javascript(src) == (
        "function f() {\n  if (x) {\n    return 1;\n  } else {\n    return 2;\n  }\n}"
    )


def test_js_keeps_interior_blank_lines_and_trims_edges() -> None:
    src = "\n\n   let a = 1;\n\n   let b = 2;\n\n"
    assert format_javascript(src) == "let a = 1;\n\nlet b = 2;"


def test_js_braces_in_strings_are_counted() -> None:
    # known limitation: no string awareness
    out = format_javascript('const s = "{";\nfoo();')
    assert out == 'const s = "{";\nfoo();'
    out = format_javascript('const s = "x {\nfoo();')
    assert out == 'const s = "x {\n  foo();'


def test_js_unbalanced_closers_floor_at_zero() -> None:
    assert format_javascript("}\n}\nx();") == "}\n}\nx();"


# ---------- dispatch ----------
@pytest.mark.parametrize("blank", ["", "   ", "\n\t\n"])
@pytest.mark.parametrize("language", ["javascript", "html", "css"])
def test_blank_input_returned_unchanged(blank: str, language: str) -> None:
    assert format_code(blank, language) == blank


def test_unknown_language_and_non_text_pass_through() -> None:
    assert format_code("x {\ny;\n}", "python") == "x {\ny;\n}"
    assert format_code(None, "javascript") is None


def test_dispatch_accepts_enum_and_aliases() -> None:
    assert format_code(".a{b:c}", Language.CSS) == format_css(".a{b:c}")
    assert format_code("if (a) {\nb();\n}", "js") == "if (a) {\n  b();\n}"


@pytest.mark.parametrize(
    "code,language",
    [
        ('<form><label for="u">User</label><input id="u"><button>Go</button></form>', "html"),
        ("<article>\n<header><h1>T</h1></header>\n<section><p>Body text</p></section>\n</article>", "html"),
        (".grid{display:grid;gap:20px}\n.item{padding:4px}", "css"),
        ("@keyframes fadeIn {\n  from { opacity: 0; }\n  to { opacity: 1; }\n}", "css"),
        ("function memo(fn) {\nconst c = new Map();\nreturn (...a) => {\nreturn fn(...a);\n};\n}", "javascript"),
    ],
)
def test_formatting_is_idempotent(code: str, language: str) -> None:
    once = format_code(code, language)
    assert format_code(once, language) == once
