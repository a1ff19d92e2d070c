"""
Markup reduction: turn raw HTML into compact text that is cheap to send to a language model.
"""

from bs4 import BeautifulSoup

from lunch_menus.fetch.utils import collapse_whitespace

# Tags that never carry menu content
DROP_TAGS = [
    "script", "style", "nav", "footer", "iframe", "svg", "head",
    "meta", "link", "form", "noscript",
]

# Cookie/consent banners
NOISE_SELECTORS = [
    ".cookie-banner", "#cookie-law-info-bar",
    '[class*="cookie" i]', '[id*="cookie" i]',
    '[class*="consent" i]', '[id*="consent" i]',
    '[class*="gdpr" i]', '[id*="gdpr" i]',
]


def reduce_markup(html: str) -> str:
    """
    Strip non-content markup and return the whitespace-collapsed text of <body>.

    Steps:
    - Remove script/style/nav/footer/iframe/svg/head/meta/link/form/noscript
    - Drop cookie/consent/GDPR containers by class/id heuristics
    - Take the body text (whole document if body is absent), collapse whitespace
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")

    for el in soup.find_all(DROP_TAGS):
        el.decompose()

    for sel in NOISE_SELECTORS:
        for el in soup.select(sel):
            if el.name in ("html", "body"):
                continue
            el.decompose()

    root = soup.body if soup.body else soup
    return collapse_whitespace(root.get_text(" "))


def page_text(html: str) -> str:
    """Whole visible document text, used for marker-phrase checks."""
    soup = BeautifulSoup(html, "html.parser")
    root = soup.body if soup.body else soup
    return collapse_whitespace(root.get_text(" "))
