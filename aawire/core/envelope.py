"""
Search response envelope returned by the news-wire search endpoint.

The endpoint answers with a JSON body shaped like::

    {
        "response": {"success": true, "code": 200, "message": ""},
        "data": {"result": [{"id": "aa:text:20170302:123", ...}, ...]}
    }

The embedded ``response.code`` decides the outcome of a search, not the
HTTP status of the transport.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from aawire.exceptions import MalformedResponseError


def read_response_code(payload: Any) -> int:
    """
    Read the embedded status code from a decoded search body.

    Args:
        payload: Decoded JSON body

    Returns:
        The value of ``response.code`` as an integer

    Raises:
        MalformedResponseError: If the code is missing or not numeric
    """
    if not isinstance(payload, dict) or not isinstance(payload.get('response'), dict):
        raise MalformedResponseError("Search response has no 'response' object")

    code = payload['response'].get('code')
    if isinstance(code, bool):
        raise MalformedResponseError(f"Search response code is not numeric: {code!r}")
    try:
        return int(code)
    except (TypeError, ValueError):
        raise MalformedResponseError(f"Search response code is not numeric: {code!r}") from None


@dataclass(frozen=True)
class SearchItem:
    """
    A single search hit. Only ``id`` is required by the crawler.
    """
    id: str
    type: Optional[str] = None
    title: Optional[str] = None
    date: Optional[str] = None

    @classmethod
    def from_payload(cls, entry: Any) -> "SearchItem":
        if not isinstance(entry, dict):
            raise MalformedResponseError(f"Search result entry is not an object: {entry!r}")
        if entry.get('id') in (None, ''):
            raise MalformedResponseError(f"Search result entry has no id: {entry!r}")
        return cls(
            id=str(entry['id']),
            type=entry.get('type'),
            title=entry.get('title'),
            date=entry.get('date'),
        )


@dataclass(frozen=True)
class SearchResult:
    """
    A decoded, successful search envelope.
    """
    response_code: int
    items: Tuple[SearchItem, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "SearchResult":
        """
        Build a SearchResult from a decoded JSON body.

        Args:
            payload: Decoded JSON body

        Returns:
            SearchResult with items in response order

        Raises:
            MalformedResponseError: If the body does not match the envelope schema
        """
        code = read_response_code(payload)

        data = payload.get('data')
        if not isinstance(data, dict):
            raise MalformedResponseError("Search response has no 'data' object")
        results = data.get('result')
        if not isinstance(results, list):
            raise MalformedResponseError("Search response 'data.result' is not a list")

        items = tuple(SearchItem.from_payload(entry) for entry in results)
        return cls(response_code=code, items=items, raw=payload)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
