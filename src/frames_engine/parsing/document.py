"""
Frame Document
==============

Queryable view over a raw HTML document.

Wraps BeautifulSoup (lxml backend) with the handful of queries the dialect
parsers need: the content of the first meta tag with a given name or
property, all meta tags whose name or property starts with a prefix, and
the document <title>.

Design Rules:
    - Meta tags are matched on either the "property" or the "name" attribute
    - Results preserve document order
    - Missing content attributes read as None
"""

from typing import List, Optional, Tuple

from bs4 import BeautifulSoup


class FrameDocument:
    """
    Parsed HTML document.

    Example:
        document = FrameDocument('<meta name="fc:frame" content="vNext"/>')
        document.get_meta_tag("fc:frame")  # "vNext"
    """

    def __init__(self, html: str) -> None:
        self._soup = BeautifulSoup(html, "lxml")
        self._meta: List[Tuple[Optional[str], Optional[str], Optional[str]]] = [
            (tag.get("property"), tag.get("name"), tag.get("content"))
            for tag in self._soup.find_all("meta")
        ]

    @classmethod
    def load(cls, html: str) -> "FrameDocument":
        return cls(html)

    def get_meta_tag(self, key: str) -> Optional[str]:
        """Content of the first meta tag whose property or name equals key."""
        for prop, name, content in self._meta:
            if prop == key or name == key:
                return content
        return None

    def find_meta_tags(self, prefix: str) -> List[Tuple[str, Optional[str]]]:
        """
        All meta tags whose property or name starts with prefix.

        Returns:
            List of (key, content) pairs in document order, where key is
            whichever of property/name matched the prefix
        """
        found: List[Tuple[str, Optional[str]]] = []

        for prop, name, content in self._meta:
            if prop is not None and prop.startswith(prefix):
                found.append((prop, content))
            elif name is not None and name.startswith(prefix):
                found.append((name, content))

        return found

    @property
    def title(self) -> Optional[str]:
        """Text of the <title> element, if any."""
        element = self._soup.find("title")
        if element is None:
            return None
        return element.get_text()
