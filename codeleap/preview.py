# codeleap/preview.py

import re

_HAS_TAG_RE = re.compile(r"<\s*[a-zA-Z][^>]*>")
_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)

PREVIEW_STYLE = """
    body { margin: 0; padding: 20px; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
           line-height: 1.6; color: #333; background: #fff; }
    * { box-sizing: border-box; }
    h1, h2, h3, h4, h5, h6 { margin-top: 0; margin-bottom: 0.5em; color: #2c3e50; }
    p { margin-bottom: 1em; }
    img, video { max-width: 100%; height: auto; }
    table { border-collapse: collapse; width: 100%; margin-bottom: 1em; }
    th, td { border: 1px solid #ddd; padding: 12px; text-align: left; }
    th { background-color: #f8f9fa; font-weight: bold; color: #495057; }
    input, textarea, select, button { margin: 4px; padding: 8px 12px; border: 1px solid #ddd; border-radius: 4px; font-family: inherit; }
    button { background-color: #007bff; color: white; cursor: pointer; font-weight: 500; }
    ul, ol { padding-left: 2em; }
    a { color: #007bff; text-decoration: none; }
    .card { border: 1px solid #dee2e6; border-radius: 8px; padding: 1rem; margin: 1rem 0; background: #f8f9fa; }
"""


def should_show_preview(code: str) -> bool:
    """Only snippets that contain at least one element tag are worth rendering."""
    if not code or not code.strip():
        return False
    return bool(_HAS_TAG_RE.search(code))


def strip_scripts(code: str) -> str:
    return _SCRIPT_RE.sub("", code or "")


def build_preview_document(code: str) -> str:
    """Wrap an HTML snippet in a standalone, script-free document for an iframe srcdoc."""
    body = strip_scripts(code)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Preview</title>
  <style>{PREVIEW_STYLE}  </style>
</head>
<body>
  {body}
</body>
</html>"""
