from notedesk.services.markdown_renderer import MarkdownRenderer, normalize_render_mode


def test_markdown_mode_renders_extensions():
    r = MarkdownRenderer()
    body = r.render_body("# Title\n\n| a | b |\n|---|---|\n| 1 | 2 |\n")
    assert "<h1" in body and "Title" in body
    assert "<table>" in body


def test_markdown_mode_strips_scripts():
    body = MarkdownRenderer().render_body("hi <script>alert(1)</script>")
    assert "<script>" not in body


def test_blocks_mode_uses_line_parser():
    r = MarkdownRenderer(mode="blocks")
    body = r.render_body("# Title\n\nSome text\n- item1\n- item2")
    assert body == (
        "<h1>Title</h1>\n"
        "<p>Some text</p>\n"
        "<ul><li>item1</li></ul>\n"
        "<ul><li>item2</li></ul>"
    )


def test_markdown_failure_falls_back_to_blocks(monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("extension blew up")

    monkeypatch.setattr("notedesk.services.markdown_renderer.md.markdown", broken)
    body = MarkdownRenderer().render_body("## Sub")
    assert body == "<h2>Sub</h2>"


def test_render_page_wraps_document():
    page = MarkdownRenderer(mode="blocks").render_page("text")
    assert page.startswith("<html>")
    assert "<body><p>text</p></body>" in page


def test_normalize_render_mode():
    assert normalize_render_mode("BLOCKS ") == "blocks"
    assert normalize_render_mode("fancy") == "markdown"
    assert normalize_render_mode(None) == "markdown"
