from typing import Optional, Sequence

from bs4 import BeautifulSoup

from lunch_menus.extractors.base import LinkLocator
from lunch_menus.fetch.utils import to_absolute_url

DEFAULT_WIDGET_DOMAINS = ("menicka.cz",)


def find_widget_url(html: str, base_url: str, domains: Sequence[str] = DEFAULT_WIDGET_DOMAINS) -> Optional[str]:
    """
    Absolute URL of an embedded third-party menu widget, if the page has one.
    Lazy-loaded iframes keep their address in data-src.
    """
    soup = BeautifulSoup(html, "html.parser")
    for attr in ("src", "data-src"):
        for iframe in soup.find_all("iframe"):
            src = (iframe.get(attr) or "").strip()
            if src and any(domain in src for domain in domains):
                return to_absolute_url(base_url, src)
    return None


class WidgetLocator(LinkLocator):
    name = "widget"

    def __init__(self, domains: Sequence[str] = DEFAULT_WIDGET_DOMAINS):
        self.domains = tuple(domains)

    def attempt(self, html: str, base_url: str) -> Optional[str]:
        return find_widget_url(html, base_url, self.domains)
