"""Fetches a web page and extracts its main readable text.

Pipeline for a single URL:

1. Fetch the body with one GET request (redirects followed, no retries).
2. Load it with BeautifulSoup and capture the ``<title>`` text.
3. Remove non-content elements (navigation, scripts, media, embeds, ...).
4. Re-parse the remaining document text and run readability over it.
5. Return the article's text content, or an empty string when readability
   finds nothing to extract.
"""

from __future__ import annotations

import time

import httpx
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from readability import Document
from readability.readability import Unparseable

from toolbox_api.models import WebPageContent
from toolbox_api.utils.exceptions import FetchError, ParseError
from toolbox_api.utils.logging import get_logger, timed_operation

logger = get_logger(__name__)

REMOVED_ELEMENTS = (
    "footer",
    "header",
    "nav",
    "script",
    "style",
    "link",
    "meta",
    "noscript",
    "img",
    "picture",
    "video",
    "audio",
    "iframe",
    "object",
    "embed",
    "param",
    "track",
    "source",
    "canvas",
    "map",
    "area",
    "svg",
    "math",
)


def strip_boilerplate(soup: BeautifulSoup) -> None:
    """Remove every denylisted element from ``soup`` in place."""
    for element in soup.find_all(REMOVED_ELEMENTS):
        element.decompose()


def readable_text(document_text: str, url: str | None = None) -> str:
    """Run readability over ``document_text`` and return the article text."""
    if not document_text.strip():
        return ""
    try:
        summary = Document(document_text, url=url).summary(html_partial=True)
    except Unparseable:
        logger.debug("Readability found no article", url=url)
        return ""
    return BeautifulSoup(summary, "lxml").get_text().strip()


class WebPageReader:
    """Reads the title and main text of web pages.

    Attributes:
        timeout: Seconds allowed for the fetch.
        user_agent: User-Agent header sent with the fetch.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            timeout: Seconds allowed for the fetch.
            user_agent: User-Agent header sent with the fetch.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    async def fetch(self, url: str) -> str:
        """GET ``url`` and return the decoded body.

        Raises:
            FetchError: If the URL is invalid, unreachable, or answers with
                a non-success status.
        """
        headers = {"User-Agent": self.user_agent} if self.user_agent else {}
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers=headers,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.log_http_fetch(
                url,
                time.perf_counter() - started,
                status_code=status_code,
                success=False,
                error_message=str(e),
            )
            raise FetchError(
                message=f"Error fetching content: {url} returned HTTP {status_code}",
                url=url,
                status_code=status_code,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.log_http_fetch(
                url,
                time.perf_counter() - started,
                success=False,
                error_message=str(e),
            )
            raise FetchError(message=f"Error fetching content: {e}", url=url) from e

        logger.log_http_fetch(
            url, time.perf_counter() - started, status_code=response.status_code
        )
        return response.text

    async def extract(self, url: str) -> WebPageContent:
        """Fetch ``url`` and return its title and main readable text.

        Raises:
            FetchError: If the page cannot be fetched.
            ParseError: If the body cannot be parsed as markup.
        """
        with timed_operation(logger, "web_page_read") as metrics:
            body = await self.fetch(url)
            metrics.bytes_fetched = len(body)

            try:
                soup = BeautifulSoup(body, "lxml")
            except ParserRejectedMarkup as e:
                raise ParseError(
                    message=f"Error parsing content: {e}", url=url
                ) from e

            title = "".join(tag.get_text() for tag in soup.find_all("title"))
            strip_boilerplate(soup)
            content = readable_text(soup.get_text(), url=url)

        logger.info(
            "Web page read",
            url=url,
            title_length=len(title),
            content_length=len(content),
        )
        return WebPageContent(title=title, content=content)
