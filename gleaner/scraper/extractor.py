"""Content extraction: turns fetched HTML into a :class:`ScrapedContent`.

Both the main text and each metadata field are located with an ordered list of
CSS selectors.  The first selector that yields non-empty text wins; later
selectors are never consulted once one has matched, and metadata fields never
borrow values from one another.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from gleaner.errors import ExtractionFailed
from gleaner.scraper.models import ScrapedContent
from gleaner.scraper.selectors import SelectorPattern, compile_patterns, parse_html

DEFAULT_CONTENT_SELECTORS: Tuple[str, ...] = (
    "article p, article li",
    "div.content p, div.content li",
    "main p, main li",
    ".documentation-content",
    "div.markdown-body",
    "div.mw-parser-output p",
    "p, li",
)

DEFAULT_METADATA_SELECTORS: Mapping[str, Tuple[str, ...]] = {
    "title": ("title", "h1.title", ".article-title", "meta[property='og:title']"),
    "description": ("meta[name='description']", "meta[property='og:description']"),
    "keywords": ("meta[name='keywords']",),
    "author": ("meta[name='author']", ".author"),
    "date": ("meta[name='date']", "meta[property='article:published_time']", ".date", "time"),
}

METADATA_FIELDS = frozenset(DEFAULT_METADATA_SELECTORS)

# Elements whose text is never page content.
_NON_CONTENT_TAGS = ("script", "style", "noscript", "template")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _node_text(node: Tag) -> str:
    return node.get_text(" ")


def _collapse(line: str) -> str:
    return " ".join(line.split())


def clean_text(text: str) -> str:
    """Drop blank lines and collapse runs of whitespace inside each line."""
    return "\n".join(_collapse(line) for line in text.splitlines() if line.strip())


def _strip_non_content(document: BeautifulSoup) -> None:
    for tag in document(list(_NON_CONTENT_TAGS)):
        tag.decompose()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_main(document: BeautifulSoup | Tag, patterns: Sequence[SelectorPattern]) -> str:
    """Return cleaned text from the first pattern that matches any text.

    Each selected node's text nodes are joined with a space and the nodes
    with newlines, so line breaks inside a container survive.  Blank lines
    are dropped and the rest collapsed by :func:`clean_text`.

    Raises:
        ExtractionFailed: If no pattern yields non-empty text.
    """
    for pattern in patterns:
        texts = [_node_text(node) for node in pattern.select(document)]
        joined = "\n".join(t for t in texts if t.strip()).strip()
        if joined:
            return clean_text(joined)

    raise ExtractionFailed("No content found with available selectors")


def _metadata_value(document: BeautifulSoup | Tag, patterns: Sequence[SelectorPattern]) -> str | None:
    for pattern in patterns:
        node = pattern.first(document)
        if node is None:
            continue
        # meta tags carry their value in ``content``
        content = node.get("content")
        if isinstance(content, str) and content.strip():
            return content.strip()
        text = _collapse(_node_text(node))
        if text:
            return text
    return None


def extract_metadata(
    document: BeautifulSoup | Tag,
    field_patterns: Mapping[str, Sequence[SelectorPattern]],
) -> Dict[str, str]:
    """Return the metadata fields that could be resolved; never raises.

    Fields whose selectors match nothing, or match only empty nodes, are
    omitted rather than defaulted.
    """
    metadata: Dict[str, str] = {}
    for name, patterns in field_patterns.items():
        value = _metadata_value(document, patterns)
        if value is not None:
            metadata[name] = value
    return metadata


class ContentScraper:
    """Extracts main content and metadata using configurable selector lists.

    Args:
        content_selectors: CSS selectors for the main text, highest priority
            first.
        metadata_selectors: Mapping of field name to its own ordered selector
            list (a single selector string is accepted too).

    Selectors that fail to compile are dropped with a warning.
    """

    def __init__(
        self,
        content_selectors: Iterable[str] = DEFAULT_CONTENT_SELECTORS,
        metadata_selectors: Mapping[str, Iterable[str] | str] = DEFAULT_METADATA_SELECTORS,
    ) -> None:
        self.content_patterns = compile_patterns(content_selectors)
        self.metadata_patterns: Dict[str, Tuple[SelectorPattern, ...]] = {
            name: compile_patterns(selectors)
            for name, selectors in metadata_selectors.items()
        }

    def extract(self, html: str, url: str) -> ScrapedContent:
        """Parse *html* and return its content and metadata.

        Raises:
            ExtractionFailed: If no content selector matches any text.
        """
        document = parse_html(html)
        metadata = extract_metadata(document, self.metadata_patterns)

        _strip_non_content(document)
        content = extract_main(document, self.content_patterns)

        return ScrapedContent(url=url, content=content, metadata=metadata)
