"""Index quote scraper (MSCI World last price from CNBC)"""

from html.parser import HTMLParser
from typing import Optional

import httpx

from .exceptions import UpstreamDecodeError
from .log import get_structured_logger
from .upstream import DEFAULT_TIMEOUT, HTTPUpstreamClient, Reading

logger = get_structured_logger(__name__, component="quote")

CNBC_MSCI_WORLD_URL = "https://www.cnbc.com/quotes/.WORLD"
LAST_PRICE_CLASS = "QuoteStrip-lastPrice"


class _ElementTextParser(HTMLParser):
    """Collects the text of the first element matching a tag and CSS class"""

    def __init__(self, tag: str, css_class: str):
        super().__init__(convert_charrefs=True)
        self.tag = tag
        self.css_class = css_class
        self.text: Optional[str] = None
        self._depth = 0
        self._parts: list[str] = []

    def handle_starttag(self, tag, attrs):
        if self.text is not None:
            return
        if self._depth:
            if tag == self.tag:
                self._depth += 1
            return
        if tag != self.tag:
            return
        classes = (dict(attrs).get("class") or "").split()
        if self.css_class in classes:
            self._depth = 1

    def handle_endtag(self, tag):
        if not self._depth or tag != self.tag:
            return
        self._depth -= 1
        if not self._depth:
            self.text = "".join(self._parts).strip()

    def handle_data(self, data):
        if self._depth:
            self._parts.append(data)


def extract_price(html: str, tag: str = "span", css_class: str = LAST_PRICE_CLASS) -> Optional[float]:
    """
    Extract a numeric quote from the first matching element.

    Thousands separators are stripped ("3,512.40" -> 3512.4). Returns None if
    no element matches or its text is not a number.
    """
    parser = _ElementTextParser(tag, css_class)
    parser.feed(html)
    parser.close()
    if parser.text is None:
        return None
    try:
        return float(parser.text.replace(",", "").strip())
    except ValueError:
        return None


class QuoteScraper(HTTPUpstreamClient):
    """Scrapes one quote page for a single price value"""

    source_id = "quote"

    def __init__(
        self,
        url: str = CNBC_MSCI_WORLD_URL,
        tag: str = "span",
        css_class: str = LAST_PRICE_CLASS,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(timeout=timeout, client=client, transport=transport)
        self.url = url
        self.tag = tag
        self.css_class = css_class
        logger.info("Initialized quote scraper", url=url)

    def fetch_price(self) -> Reading:
        """
        Fetch the page and extract the last price.

        Raises:
            UpstreamError: If the request fails or no price can be found
        """
        response = self._get(self.url)
        price = extract_price(response.text, self.tag, self.css_class)
        if price is None:
            raise UpstreamDecodeError(
                self.source_id, f"no numeric {self.tag}.{self.css_class} element on page"
            )

        return Reading(
            sensor_id="last_price",
            name=self.url,
            value=price,
            metadata={"url": self.url},
        )
