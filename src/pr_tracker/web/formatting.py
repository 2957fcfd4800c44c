"""Template filters."""

import re

from markupsafe import Markup, escape

BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
ITALIC_RE = re.compile(r"(?<!\*)\*(?![\s*])(.+?)(?<![\s*])\*(?!\*)")
LIST_ITEM_RE = re.compile(r"^\s*[*-]\s+(.*)$")


def _inline(text: str) -> str:
    text = BOLD_RE.sub(r"<strong>\1</strong>", text)
    return ITALIC_RE.sub(r"<em>\1</em>", text)


def format_message(text: str | None) -> Markup:
    """Render a chat message's light markdown as HTML.

    Supports **bold**, *italic*, "* " / "- " bullet lists and blank-line
    separated paragraphs. The text is escaped before any markup is added.
    """
    html: list[str] = []
    paragraph: list[str] = []
    items: list[str] = []

    def flush_paragraph():
        if paragraph:
            html.append("<p>" + "<br>".join(paragraph) + "</p>")
            paragraph.clear()

    def flush_list():
        if items:
            html.append("<ul>" + "".join(f"<li>{i}</li>" for i in items) + "</ul>")
            items.clear()

    for line in str(escape(text or "")).splitlines():
        match = LIST_ITEM_RE.match(line)
        if match:
            flush_paragraph()
            items.append(_inline(match.group(1).strip()))
        elif not line.strip():
            flush_paragraph()
            flush_list()
        else:
            flush_list()
            paragraph.append(_inline(line.strip()))

    flush_paragraph()
    flush_list()
    return Markup("".join(html))
