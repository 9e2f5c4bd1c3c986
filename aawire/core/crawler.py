"""
News-wire API crawler for aawire.
"""
import json
import random
import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import List, Optional, Tuple

import requests

from aawire.config import API_BASE_URL, SearchFilters
from aawire.core.article import Article
from aawire.core.envelope import SearchResult, read_response_code
from aawire.core.newsml import newsml_to_news, parse_document
from aawire.exceptions import (
    AuthenticationError,
    InvalidConfiguration,
    MalformedResponseError,
    NoDataFoundError,
)
from aawire.utils.http import RateLimiter, REQUEST_TIMEOUT
from aawire.utils.text import SUMMARY_LENGTH, create_summary

# Configure logging
logger = logging.getLogger(__name__)

DOCUMENT_FORMAT = 'newsml29'


class Crawler:
    """
    Searches the news-wire API and turns the matching NewsML documents into
    Article objects.
    """
    def __init__(
        self,
        config: Mapping,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
        base_url: str = API_BASE_URL,
        summary_length: int = SUMMARY_LENGTH,
        timeout: float = REQUEST_TIMEOUT,
        filters: Optional[SearchFilters] = None,
    ):
        """
        Initialize the Crawler.

        Args:
            config: Mapping with 'userName' and 'password' keys
            session: HTTP session used for every request
            rate_limiter: Gate that paces calls to the API
            base_url: Base URL of the API
            summary_length: Maximum length of summaries made by create_summary
            timeout: Request timeout in seconds
            filters: Initial search filters, defaults to DEFAULT_FILTERS
        """
        self.user_name = ''
        self.password = ''
        self.auth: Tuple[str, str] = ('', '')
        self.set_parameters(config)

        self._owns_session = session is None
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.base_url = base_url.rstrip('/')
        self.summary_length = summary_length
        self.timeout = timeout
        self.filters = filters if filters is not None else SearchFilters()

    def __enter__(self) -> "Crawler":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP session if this crawler created it."""
        if self._owns_session:
            self.session.close()

    def set_parameters(self, config: Mapping) -> None:
        """
        Set credentials from a configuration mapping.

        Args:
            config: Mapping that may hold 'userName' and 'password'; other
                keys are ignored

        Raises:
            InvalidConfiguration: If config is not a mapping
        """
        if not isinstance(config, Mapping):
            raise InvalidConfiguration(f"config must be a mapping, got {type(config).__name__}")
        if 'userName' in config:
            self.user_name = config['userName']
        if 'password' in config:
            self.password = config['password']

        self.auth = (self.user_name, self.password)

    def set_attributes(self, attributes: Optional[Mapping] = None) -> SearchFilters:
        """
        Merge filter attributes into the current search filters.

        Args:
            attributes: Filter key-value pairs; colliding keys win

        Returns:
            The merged filters now used by this crawler
        """
        self.filters = self.filters.merge(attributes)
        return self.filters

    def crawl(self, attributes: Optional[Mapping] = None) -> List[Article]:
        """
        Search with the given filter overrides and map every found document.

        Documents that come back empty are skipped. Errors from searching,
        fetching or parsing are not caught.

        Args:
            attributes: Filter overrides merged before searching

        Returns:
            Articles in search result order
        """
        self.set_attributes(attributes)

        result = []
        search = self.search()

        self.rate_limiter.acquire()
        for item in search.items:
            newsml = self.document(item.id)
            if newsml is not None:
                result.append(self.newsml_to_news(newsml))
            else:
                logger.warning(f"Skipping document {item.id}: no content returned")
            self.rate_limiter.acquire()

        logger.info(f"Crawled {len(result)} of {len(search.items)} documents")
        return result

    def newsml_to_news(self, xml: ET.Element) -> Article:
        """
        Create an Article from a parsed NewsML document.

        Args:
            xml: Root element of the document

        Returns:
            The mapped Article
        """
        return newsml_to_news(xml, self.get_document_link)

    to_article = newsml_to_news

    def get_document_link(self, document_id: str, fmt: str) -> str:
        """
        Create a document link for later requests.

        Args:
            document_id: Document id
            fmt: Format token, e.g. 'web'

        Returns:
            The document URL
        """
        return f"{self.base_url}/document/{document_id}/{fmt}"

    def document(self, document_id: str) -> Optional[ET.Element]:
        """
        Fetch a NewsML document and parse it.

        Args:
            document_id: Document id from a search result

        Returns:
            Root element of the document, or None when nothing was returned

        Raises:
            MalformedDocumentError: If the returned text is not valid XML
        """
        url = f"{self.base_url}/abone/document/{document_id}/{DOCUMENT_FORMAT}?v=2{random.randint(1000, 9999)}"
        logger.debug(f"Fetching document {url}")
        newsml = self.fetch_url(url, 'GET')
        if not newsml.strip():
            return None
        return parse_document(newsml)

    def search(self) -> SearchResult:
        """
        Search documents with the current filter attributes.

        Returns:
            The decoded search envelope

        Raises:
            AuthenticationError: If the envelope reports code 401
            NoDataFoundError: If the envelope reports any code but 200 or 401
            MalformedResponseError: If the body is not a valid envelope
        """
        logger.info(f"Searching with filters {self.filters.as_form()}")
        res = self.fetch_url(f"{self.base_url}/abone/search", 'POST', data=self.filters.as_form())
        if not res:
            raise NoDataFoundError(message="Search request returned no content")

        try:
            payload = json.loads(res)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Search response is not JSON: {e}") from e

        code = read_response_code(payload)
        if code == 401:
            raise AuthenticationError()
        if code != 200:
            raise NoDataFoundError(code)

        search = SearchResult.from_payload(payload)
        logger.info(f"Search returned {len(search.items)} results")
        return search

    def create_summary(self, text: str) -> str:
        """
        Create a short summary of the text with the wire credit stripped.

        Args:
            text: Article body

        Returns:
            The summary, at most summary_length characters plus an ellipsis
        """
        return create_summary(text, self.summary_length)

    def fetch_url(self, url: str, method: str = 'GET', **options) -> str:
        """
        Fetch a URL and return the response body.

        Args:
            url: URL to fetch
            method: HTTP method
            **options: Extra arguments for the request, e.g. form data

        Returns:
            The response text, or an empty string if the status is not 200
        """
        res = self.session.request(method, url, auth=self.auth, timeout=self.timeout, **options)
        if res.status_code == 200:
            return res.text
        logger.warning(f"{method} {url} returned status {res.status_code}")
        return ''
