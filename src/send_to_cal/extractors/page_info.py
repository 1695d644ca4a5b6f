"""Page title and summary used to prefill a new event."""

from pydantic import BaseModel

from .document import PageDocument


class PageInfo(BaseModel):
    title: str = ""
    description: str = ""


def _meta(document: PageDocument, selector: str) -> str:
    element = document.select_one(selector)
    if element is None:
        return ""
    return element.get_attribute("content") or ""


def scrape_page(document: PageDocument) -> PageInfo:
    """Prefer Open Graph title/description over ``<title>`` and meta description."""
    title_element = document.select_one("title")
    title = _meta(document, 'meta[property="og:title"]') or (
        title_element.text if title_element is not None else ""
    )

    if document.select_one('meta[property="og:description"]') is not None:
        description = _meta(document, 'meta[property="og:description"]')
    else:
        description = _meta(document, 'meta[name="description"]')

    return PageInfo(title=title.strip(), description=description.strip())
