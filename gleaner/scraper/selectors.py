"""Compiled CSS selector patterns evaluated in priority order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import soupsieve
from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectorPattern:
    """A single CSS selector, compiled once and reused across documents.

    Raises:
        soupsieve.SelectorSyntaxError: If *css* is not a valid selector.
    """

    css: str
    _compiled: soupsieve.SoupSieve = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", soupsieve.compile(self.css))

    def select(self, document: BeautifulSoup | Tag) -> List[Tag]:
        """Return every node matching the selector, in document order."""
        return self._compiled.select(document)

    def first(self, document: BeautifulSoup | Tag) -> Optional[Tag]:
        """Return the first matching node, or ``None``."""
        return self._compiled.select_one(document)


def compile_patterns(selectors: Iterable[str] | str) -> Tuple[SelectorPattern, ...]:
    """Compile *selectors* in order, dropping any that fail to parse.

    A bare string is treated as a one-element list.
    """
    if isinstance(selectors, str):
        selectors = [selectors]

    patterns: List[SelectorPattern] = []
    for css in selectors:
        try:
            patterns.append(SelectorPattern(css))
        except soupsieve.SelectorSyntaxError as exc:
            logger.warning("Dropping invalid selector %r: %s", css, exc)
    return tuple(patterns)


def parse_html(markup: str) -> BeautifulSoup:
    """Parse *markup* with the standard-library backed ``html.parser``."""
    return BeautifulSoup(markup, "html.parser")
