"""
aawire - News-wire API client

Searches a subscriber news-wire API, fetches the matching NewsML documents
and maps them into plain Article records ready for storage or display.
"""

__version__ = "0.1.0"

from aawire.core.article import Article  # noqa: E402
from aawire.core.crawler import Crawler  # noqa: E402
from aawire.exceptions import (  # noqa: E402
    AgencyError,
    AuthenticationError,
    InvalidConfiguration,
    MalformedDocumentError,
    MalformedResponseError,
    NoDataFoundError,
)

__all__ = [
    "Article",
    "Crawler",
    "AgencyError",
    "AuthenticationError",
    "InvalidConfiguration",
    "MalformedDocumentError",
    "MalformedResponseError",
    "NoDataFoundError",
]
