"""HTML text pipeline.

``extract_text`` flattens a page into plain text for the translate-by-URL API.
``translate_document`` rewrites every text node of a page in place and
re-serialises it, leaving tags, attributes and node order untouched.

Both walk the parsed tree in pre-order with an explicit stack, so deeply
nested documents never hit the recursion limit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from linguaproxy.errors import LinguaProxyError, ParseError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from bs4 import PageElement

    from linguaproxy.protocols import TextTranslator

log = structlog.get_logger()

_PARSER = "html.parser"


def _parse(html: bytes | str, encoding: str | None = None) -> BeautifulSoup:
    # Bytes without a known encoding are sniffed (BOM, then <meta charset>).
    try:
        if isinstance(html, bytes) and encoding:
            return BeautifulSoup(html, _PARSER, from_encoding=encoding)
        return BeautifulSoup(html, _PARSER)
    except Exception as exc:
        raise ParseError(f"Error parsing HTML: {exc}") from exc


def _is_text_node(node: PageElement) -> bool:
    # Comments, doctypes, CDATA and processing instructions are not text.
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def iter_text_nodes(root: Tag) -> Iterator[NavigableString]:
    """Yield text nodes under ``root`` in document (pre-order) order."""
    stack: list[PageElement] = list(reversed(root.contents))
    while stack:
        node = stack.pop()
        if isinstance(node, Tag):
            stack.extend(reversed(node.contents))
        elif _is_text_node(node):
            yield node


def extract_text(html: bytes | str) -> str:
    """Return every non-blank text node, stripped and joined by single spaces."""
    soup = _parse(html)
    parts = [text for node in iter_text_nodes(soup) if (text := node.strip())]
    return " ".join(parts).strip()


async def translate_document(
    html: bytes | str,
    target_language: str,
    translate: TextTranslator,
    *,
    encoding: str | None = None,
) -> str:
    """Translate each non-blank text node of ``html`` and return the new markup.

    ``html`` may be raw bytes, with ``encoding`` naming the charset declared
    by the response headers, if any. The node's raw text (surrounding
    whitespace included) is what gets translated. A failed node keeps its
    original text and the walk goes on. The result declares UTF-8.
    """
    soup = _parse(html, encoding)

    # Collected up front; nodes are replaced in the tree below.
    nodes = list(iter_text_nodes(soup))
    translated_count = 0
    failed_count = 0

    for node in nodes:
        if not node.strip():
            continue
        try:
            translated = await translate(str(node), target_language)
        except LinguaProxyError as exc:
            failed_count += 1
            log.debug("text_node_translation_failed", error=exc.message)
            continue
        # Keep the node class so script/style contents stay unescaped.
        node.replace_with(type(node)(translated))
        translated_count += 1

    if failed_count:
        log.warning(
            "document_partially_translated",
            target_language=target_language,
            translated_nodes=translated_count,
            failed_nodes=failed_count,
        )

    try:
        return soup.decode()
    except Exception as exc:
        raise ParseError(f"Error rendering HTML: {exc}") from exc
