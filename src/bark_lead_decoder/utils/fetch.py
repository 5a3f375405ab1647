"""HTTP fetching of directory pages for the CLI."""

import logging
from datetime import datetime
from typing import Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, RetryError

from bark_lead_decoder.exceptions import FetchError
from bark_lead_decoder.models.lead import RawDocument

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

DEFAULT_HEADERS = {
    'User-Agent': (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
}


class PageFetcher:
    """Fetches provider pages over HTTP with retries."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = DEFAULT_TIMEOUT):
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        self.timeout = timeout

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(requests.RequestException)
    )
    def _get(self, url: str) -> requests.Response:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response

    def fetch(self, url: str) -> RawDocument:
        """
        Fetch a page as a RawDocument.

        Args:
            url: Page URL

        Returns:
            RawDocument: Page HTML with its URL and fetch time

        Raises:
            FetchError: If the page could not be fetched after retries
        """
        logger.info(f"Fetching {url}")
        try:
            response = self._get(url)
        except (requests.RequestException, RetryError) as e:
            logger.error(f"Failed to fetch {url}: {str(e)}")
            raise FetchError(f"Failed to fetch {url}: {str(e)}") from e

        return RawDocument(html=response.text, source_url=url, fetched_at=datetime.now())
