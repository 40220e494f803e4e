"""SEO signal extraction from raw HTML.

:func:`extract` turns an HTML document into a :class:`PageElements` value.  It
uses the tolerant ``lxml`` tree builder so malformed markup never raises;
missing tags simply produce empty/default values.
"""

from typing import List, Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import PreformattedString

from app.models.audit import PageElements
from app.services.errors import ParseError


def _attr_ci(tag: Tag, name: str) -> Optional[str]:
    """Return the value of attribute *name* on *tag*, matching the name case-insensitively."""
    for key, value in tag.attrs.items():
        if key.lower() == name:
            if isinstance(value, list):
                return " ".join(value)
            return str(value)
    return None


def _extract_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    if title_tag:
        return title_tag.get_text().strip()
    return ""


def _extract_meta_description(soup: BeautifulSoup) -> str:
    for meta in soup.find_all("meta"):
        name = _attr_ci(meta, "name")
        if name is None or name.strip().lower() != "description":
            continue
        content = _attr_ci(meta, "content")
        if content is not None:
            return content.strip()
    return ""


def _extract_headings(soup: BeautifulSoup, level: str) -> List[str]:
    return [h.get_text().strip() for h in soup.find_all(level)]


def _has_meta(soup: BeautifulSoup, attr: str, predicate) -> bool:
    for meta in soup.find_all("meta"):
        value = _attr_ci(meta, attr)
        if value is not None and predicate(value.strip().lower()):
            return True
    return False


def _count_words(soup: BeautifulSoup) -> int:
    # Script and style text counts too; comments, doctypes and CDATA do not
    strings = (
        s for s in soup.find_all(string=True) if not isinstance(s, PreformattedString)
    )
    return len(" ".join(strings).split())


def extract(html: Union[str, bytes]) -> PageElements:
    """Extract the SEO facts of *html*.

    Raises:
        ParseError: if *html* is not text at all.  Malformed markup never raises.
    """
    if not isinstance(html, (str, bytes)):
        raise ParseError(f"Cannot parse HTML content of type {type(html).__name__}.")

    soup = BeautifulSoup(html, "lxml")

    images = soup.find_all("img")
    missing_alt = sum(1 for img in images if _attr_ci(img, "alt") is None)

    return PageElements(
        title=_extract_title(soup),
        meta_description=_extract_meta_description(soup),
        h1_tags=_extract_headings(soup, "h1"),
        h2_tags=_extract_headings(soup, "h2"),
        image_total=len(images),
        images_missing_alt=missing_alt,
        link_count=len(soup.find_all("a", href=True)),
        word_count=_count_words(soup),
        has_open_graph=_has_meta(soup, "property", lambda v: v.startswith("og:")),
        has_twitter_card=_has_meta(soup, "name", lambda v: v == "twitter:card"),
    )
