from __future__ import annotations

import html
from dataclasses import dataclass
from enum import Enum


class BlockKind(str, Enum):
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    PARAGRAPH = "paragraph"
    BULLET_POINT = "bulletPoint"


@dataclass(frozen=True)
class Block:
    kind: BlockKind
    text: str


# markers include the trailing space, so "# " never matches "## x"
_PREFIXES: tuple[tuple[str, BlockKind], ...] = (
    ("# ", BlockKind.HEADING1),
    ("## ", BlockKind.HEADING2),
    ("### ", BlockKind.HEADING3),
    ("- ", BlockKind.BULLET_POINT),
    ("* ", BlockKind.BULLET_POINT),
)


def _match_prefix(trimmed: str) -> Block | None:
    for prefix, kind in _PREFIXES:
        if trimmed.startswith(prefix):
            return Block(kind, trimmed[len(prefix):])
    return None


def parse_blocks(text: str) -> list[Block]:
    """
    Minimal line-oriented Markdown -> blocks, for the preview pane.

    Headings (#, ##, ###) and bullets (-, *) are one block per line; every
    other non-blank run of lines becomes a paragraph. Consecutive bullets are
    NOT grouped into a list. No inline markup, code blocks or tables.
    """
    blocks: list[Block] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append(Block(BlockKind.PARAGRAPH, "\n".join(paragraph)))
            paragraph.clear()

    for line in (text or "").splitlines():
        trimmed = line.strip()
        if not trimmed:
            flush()
            continue

        block = _match_prefix(trimmed)
        if block is None:
            # paragraph keeps the raw line, indentation included
            paragraph.append(line)
            continue

        flush()
        blocks.append(block)

    flush()
    return blocks


_HTML_TAGS = {
    BlockKind.HEADING1: "h1",
    BlockKind.HEADING2: "h2",
    BlockKind.HEADING3: "h3",
    BlockKind.PARAGRAPH: "p",
    BlockKind.BULLET_POINT: "li",
}


def blocks_to_html(blocks: list[Block]) -> str:
    """Fallback preview HTML. Every block text is escaped."""
    out: list[str] = []
    for b in blocks:
        tag = _HTML_TAGS[b.kind]
        body = html.escape(b.text).replace("\n", "<br/>")
        if b.kind is BlockKind.BULLET_POINT:
            # one list per bullet, same as the block model
            out.append(f"<ul><{tag}>{body}</{tag}></ul>")
        else:
            out.append(f"<{tag}>{body}</{tag}>")
    return "\n".join(out)
