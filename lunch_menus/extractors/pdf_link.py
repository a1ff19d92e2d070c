import re
from typing import Optional

from bs4 import BeautifulSoup

from lunch_menus.extractors.base import LinkLocator
from lunch_menus.fetch.utils import fold, to_absolute_url

DAILY_KEYWORDS = re.compile(r"denn|poledn|daily|lunch")


def find_pdf_url(html: str, base_url: str) -> Optional[str]:
    """
    Absolute URL of the page's lunch-menu PDF.

    A link whose href or text mentions a daily/lunch menu wins; otherwise the
    last PDF on the page is returned, which may well be some other document.
    """
    soup = BeautifulSoup(html, "html.parser")
    fallback = None
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href.lower().endswith(".pdf"):
            continue
        if DAILY_KEYWORDS.search(fold(href)) or DAILY_KEYWORDS.search(fold(a.get_text())):
            return to_absolute_url(base_url, href)
        fallback = href
    return to_absolute_url(base_url, fallback) if fallback else None


class PdfLinkLocator(LinkLocator):
    name = "pdf-link"

    def attempt(self, html: str, base_url: str) -> Optional[str]:
        return find_pdf_url(html, base_url)
