"""Read-only document tree used by the extractors.

Extractors only need CSS selection, attribute and text access, and a little
tree navigation, so they are written against the small ``PageDocument`` /
``PageElement`` interface. ``SoupDocument`` backs it with BeautifulSoup.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag

# HTML default ``display`` values. Everything not listed is inline.
BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "dd", "details",
        "dialog", "div", "dl", "dt", "fieldset", "figcaption", "figure",
        "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header",
        "hgroup", "hr", "html", "main", "nav", "ol", "p", "pre", "section",
        "summary", "table", "ul",
    }
)

_DISPLAY_RE = re.compile(r"(?:^|;)\s*display\s*:\s*([a-z-]+)", re.IGNORECASE)


class PageElement(ABC):
    """A single element of a page."""

    @property
    @abstractmethod
    def tag(self) -> str:
        """Lower-case tag name."""

    @property
    @abstractmethod
    def text(self) -> str:
        """Concatenated text of the element and its descendants."""

    @property
    @abstractmethod
    def display(self) -> str:
        """CSS display value (``block``, ``inline``, ``list-item``, ...)."""

    @property
    @abstractmethod
    def parent(self) -> Optional["PageElement"]:
        """Parent element, None at the top of the tree."""

    @property
    @abstractmethod
    def next_element_sibling(self) -> Optional["PageElement"]:
        """Next sibling that is an element, skipping text nodes."""

    @abstractmethod
    def get_attribute(self, name: str) -> Optional[str]:
        """Attribute value, None when absent."""

    @abstractmethod
    def select(self, selector: str) -> list["PageElement"]:
        """All descendants matching a CSS selector, in document order."""

    @abstractmethod
    def select_one(self, selector: str) -> Optional["PageElement"]:
        """First descendant matching a CSS selector."""


class PageDocument(ABC):
    """A snapshot of a page."""

    @property
    @abstractmethod
    def body(self) -> Optional[PageElement]:
        """The ``<body>`` element, or the root element when there is none."""

    @abstractmethod
    def select(self, selector: str) -> list[PageElement]:
        """All elements matching a CSS selector, in document order."""

    @abstractmethod
    def select_one(self, selector: str) -> Optional[PageElement]:
        """First element matching a CSS selector."""

    @abstractmethod
    def find_text(self, fragment: str) -> Optional[PageElement]:
        """Innermost element whose own text contains ``fragment``."""


class SoupElement(PageElement):
    """``PageElement`` backed by a BeautifulSoup ``Tag``."""

    def __init__(self, node: Tag):
        self._node = node

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SoupElement) and other._node is self._node

    def __hash__(self) -> int:
        return id(self._node)

    def __repr__(self) -> str:
        return f"<SoupElement {self.tag}>"

    @property
    def tag(self) -> str:
        return self._node.name.lower()

    @property
    def text(self) -> str:
        return self._node.get_text()

    @property
    def display(self) -> str:
        style = self.get_attribute("style")
        if style:
            match = _DISPLAY_RE.search(style)
            if match:
                return match.group(1).lower()
        if self.tag == "li":
            return "list-item"
        if self.tag in BLOCK_TAGS:
            return "block"
        return "inline"

    @property
    def parent(self) -> Optional[PageElement]:
        parent = self._node.parent
        if parent is None or not isinstance(parent, Tag) or isinstance(parent, BeautifulSoup):
            return None
        return SoupElement(parent)

    @property
    def next_element_sibling(self) -> Optional[PageElement]:
        sibling = self._node.find_next_sibling()
        return SoupElement(sibling) if sibling is not None else None

    def get_attribute(self, name: str) -> Optional[str]:
        value = self._node.get(name)
        if value is None:
            return None
        # Multi-valued attributes (class, rel, ...) come back as lists
        if isinstance(value, list):
            return " ".join(value)
        return value

    def select(self, selector: str) -> list[PageElement]:
        return [SoupElement(node) for node in self._node.select(selector)]

    def select_one(self, selector: str) -> Optional[PageElement]:
        node = self._node.select_one(selector)
        return SoupElement(node) if node is not None else None


class SoupDocument(PageDocument):
    """``PageDocument`` parsed from an HTML string."""

    def __init__(self, html: str):
        self.html = html
        self._soup = BeautifulSoup(html, "html.parser")

    @property
    def body(self) -> Optional[PageElement]:
        node = self._soup.body or self._soup.find()
        return SoupElement(node) if node is not None else None

    def select(self, selector: str) -> list[PageElement]:
        return [SoupElement(node) for node in self._soup.select(selector)]

    def select_one(self, selector: str) -> Optional[PageElement]:
        node = self._soup.select_one(selector)
        return SoupElement(node) if node is not None else None

    def find_text(self, fragment: str) -> Optional[PageElement]:
        needle = fragment.strip()
        if not needle:
            return None
        scope = self._soup.body or self._soup
        string = scope.find(
            string=lambda s: isinstance(s, NavigableString)
            and s.parent is not None
            and s.parent.name not in ("script", "style")
            and needle in s
        )
        if string is not None:
            return SoupElement(string.parent)

        # Selection spanning several text nodes: deepest element holding all of it
        needle = " ".join(needle.split())
        match = None
        for node in scope.find_all(True):
            if node.name in ("script", "style"):
                continue
            if needle not in " ".join(node.get_text().split()):
                continue
            if match is None or any(p is match for p in node.parents):
                match = node
        return SoupElement(match) if match is not None else None
