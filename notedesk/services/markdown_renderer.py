from __future__ import annotations

import markdown as md

from notedesk.core.blocks import blocks_to_html, parse_blocks
from notedesk.core.sanitize import sanitize_rendered_html
from notedesk.logging_setup import log

MD_EXTENSIONS = ["fenced_code", "tables", "toc"]

RENDER_MODES = ("markdown", "blocks")

BASE_CSS = """
    body { font-family: sans-serif; padding: 16px; line-height: 1.5; }
    code, pre { background: #f5f5f5; }
    pre { padding: 12px; overflow-x: auto; }
    ul { margin: 4px 0; }
    a { text-decoration: none; }
    a:hover { text-decoration: underline; }
"""


def normalize_render_mode(mode: str | None) -> str:
    mode = (mode or "").strip().lower()
    return mode if mode in RENDER_MODES else "markdown"


class MarkdownRenderer:
    """
    note text -> full HTML page for the preview pane.

    "markdown": python-markdown + bleach sanitization.
    "blocks":   the built-in line parser (headings, bullets, paragraphs).
    A markdown failure falls back to "blocks" for that render.
    """

    def __init__(self, *, mode: str = "markdown"):
        self.mode = normalize_render_mode(mode)

    def set_mode(self, mode: str) -> None:
        self.mode = normalize_render_mode(mode)

    def render_body(self, text: str) -> str:
        if self.mode == "markdown":
            try:
                rendered = md.markdown(text or "", extensions=MD_EXTENSIONS)
                return sanitize_rendered_html(rendered)
            except Exception:
                log.exception("Markdown render failed; using block preview")
        return blocks_to_html(parse_blocks(text))

    def render_page(self, text: str) -> str:
        return wrap_html_page(self.render_body(text))


def wrap_html_page(rendered_html: str, *, css: str = BASE_CSS) -> str:
    """Wrap safe HTML into a full HTML document for WebEngine."""
    return f"""\
<html>
<head>
  <meta charset="utf-8"/>
  <style>{css}</style>
</head>
<body>{rendered_html}</body>
</html>
"""
