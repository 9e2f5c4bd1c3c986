import json
import re
from types import SimpleNamespace

import pytest

from aawire.config import DEFAULT_FILTERS, SearchFilters
from aawire.core.crawler import Crawler
from aawire.core.envelope import SearchResult
from aawire.exceptions import (
    AuthenticationError,
    InvalidConfiguration,
    MalformedDocumentError,
    MalformedResponseError,
    NoDataFoundError,
)
from aawire.utils.http import RateLimiter

from conftest import DummyResponse, FULL_NEWSML, newsml_for, search_body

DOCUMENT_URL = re.compile(r"^https://api\.aa\.com\.tr/abone/document/(?P<id>[^/]+)/newsml29\?v=2(?P<rand>\d{4})$")


def api(ids, documents, code=200):
    """Answer search with ``ids`` and documents from the ``documents`` dict."""

    def handler(method, url, kwargs):
        if url.endswith("/abone/search"):
            return DummyResponse(search_body(ids, code))
        match = DOCUMENT_URL.match(url)
        assert match, f"Unexpected request for {url}"
        doc = documents.get(match.group("id"))
        if doc is None:
            return DummyResponse("", status_code=404)
        return DummyResponse(doc)

    return handler


def test_set_parameters_rejects_non_mapping() -> None:
    with pytest.raises(InvalidConfiguration):
        Crawler(["user", "secret"])


def test_set_parameters_defaults_missing_credentials_to_empty() -> None:
    crawler = Crawler({"unrelated": "value"}, session=SimpleNamespace())

    assert crawler.auth == ("", "")


def test_set_parameters_keeps_previous_values_for_missing_keys() -> None:
    crawler = Crawler({"userName": "user", "password": "secret"}, session=SimpleNamespace())

    crawler.set_parameters({"password": "rotated"})

    assert crawler.auth == ("user", "rotated")


def test_set_attributes_merges_over_defaults() -> None:
    crawler = Crawler({}, session=SimpleNamespace())
    before = crawler.filters

    crawler.set_attributes({"limit": "20", "filter_category": "2"})

    assert dict(crawler.filters) == {**DEFAULT_FILTERS, "limit": "20", "filter_category": "2"}
    assert dict(before) == DEFAULT_FILTERS


def test_search_sends_filters_and_credentials(make_crawler) -> None:
    crawler, session = make_crawler(api(["a", "b"], {}))
    crawler.set_attributes({"limit": "2", "filter_language": "2"})

    result = crawler.search()

    method, url, kwargs = session.calls[0]
    assert method == "POST"
    assert url == "https://api.aa.com.tr/abone/search"
    assert kwargs["data"] == {"filter_language": "2", "filter_type": "1", "limit": "2"}
    assert kwargs["auth"] == ("user", "secret")
    assert isinstance(result, SearchResult)
    assert [item.id for item in result.items] == ["a", "b"]


def test_search_raises_authentication_error_on_401(make_crawler) -> None:
    crawler, _ = make_crawler(api([], {}, code=401))

    with pytest.raises(AuthenticationError):
        crawler.search()


@pytest.mark.parametrize("code", [404, 500, 0])
def test_search_raises_no_data_for_other_codes(make_crawler, code) -> None:
    crawler, _ = make_crawler(api([], {}, code=code))

    with pytest.raises(NoDataFoundError) as excinfo:
        crawler.search()

    assert excinfo.value.code == code


def test_search_uses_envelope_code_not_transport_status(make_crawler) -> None:
    crawler, _ = make_crawler(lambda method, url, kwargs: DummyResponse(search_body(["x"], code=404)))

    with pytest.raises(NoDataFoundError):
        crawler.search()


def test_search_with_empty_body_reports_no_data(make_crawler) -> None:
    crawler, _ = make_crawler(lambda method, url, kwargs: DummyResponse("", status_code=503))

    with pytest.raises(NoDataFoundError):
        crawler.search()


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        json.dumps({"data": {"result": []}}),
        json.dumps({"response": {"code": 200}}),
        json.dumps({"response": {"code": 200}, "data": {"result": [{"title": "no id"}]}}),
    ],
)
def test_search_rejects_malformed_envelopes(make_crawler, body) -> None:
    crawler, _ = make_crawler(lambda method, url, kwargs: DummyResponse(body))

    with pytest.raises(MalformedResponseError):
        crawler.search()


def test_document_builds_cache_busting_url(make_crawler) -> None:
    crawler, session = make_crawler(api([], {"aa:text:1": FULL_NEWSML}))

    root = crawler.document("aa:text:1")

    method, url, kwargs = session.calls[0]
    match = DOCUMENT_URL.match(url)
    assert method == "GET"
    assert match and match.group("id") == "aa:text:1"
    assert 1000 <= int(match.group("rand")) <= 9999
    assert kwargs["auth"] == ("user", "secret")
    assert root is not None


def test_document_returns_none_on_non_200(make_crawler) -> None:
    crawler, _ = make_crawler(api([], {}))

    assert crawler.document("missing") is None


def test_document_raises_on_malformed_xml(make_crawler) -> None:
    crawler, _ = make_crawler(api([], {"bad": "<newsMessage><itemSet>"}))

    with pytest.raises(MalformedDocumentError):
        crawler.document("bad")


def test_get_document_link() -> None:
    crawler = Crawler({}, session=SimpleNamespace(), base_url="https://api.example.com/")

    assert crawler.get_document_link("aa:picture:1", "web") == "https://api.example.com/document/aa:picture:1/web"


def test_crawl_skips_empty_documents_and_keeps_order(make_crawler, sleeper) -> None:
    ids = ["one", "two", "three", "four"]
    documents = {"one": newsml_for("First"), "three": newsml_for("Third"), "four": newsml_for("Fourth")}
    crawler, _ = make_crawler(api(ids, documents))

    articles = crawler.crawl({"limit": "4"})

    assert [article.title for article in articles] == ["First", "Third", "Fourth"]
    # one pause after the search and one after every item
    assert sleeper.pauses == [0.3] * (1 + len(ids))


def test_crawl_persists_overrides_for_later_calls(make_crawler) -> None:
    crawler, session = make_crawler(api([], {}))

    crawler.crawl({"filter_type": "3"})
    crawler.crawl()

    assert session.calls[-1][2]["data"]["filter_type"] == "3"


def test_crawl_propagates_search_errors_without_fetching(make_crawler, sleeper) -> None:
    crawler, session = make_crawler(api(["one"], {}, code=401))

    with pytest.raises(AuthenticationError):
        crawler.crawl()

    assert len(session.calls) == 1
    assert sleeper.pauses == []


def test_crawl_aborts_on_malformed_document(make_crawler) -> None:
    crawler, _ = make_crawler(api(["ok", "bad"], {"ok": newsml_for("Fine"), "bad": "<oops"}))

    with pytest.raises(MalformedDocumentError):
        crawler.crawl()


def test_crawl_maps_image_links_with_base_url(make_crawler) -> None:
    crawler, _ = make_crawler(api(["full"], {"full": FULL_NEWSML}))

    [article] = crawler.crawl()

    assert article.images == ("https://api.aa.com.tr/document/aa:picture:20170302:111/web",)


def test_create_summary_uses_configured_length() -> None:
    crawler = Crawler({}, session=SimpleNamespace(), summary_length=12)

    assert crawler.create_summary("X (DHA) - Kısa bir haber metni") == "Kısa bir..."


def test_rate_limiter_can_be_disabled(sleeper) -> None:
    limiter = RateLimiter(delay=0, sleep=sleeper)

    limiter.acquire()

    assert sleeper.pauses == []


def test_search_filters_merge_is_pure() -> None:
    filters = SearchFilters()

    merged = filters.merge({"limit": "9"})

    assert filters["limit"] == "5"
    assert merged["limit"] == "9"
    assert merged.as_form() == {"filter_language": "1", "filter_type": "1", "limit": "9"}


def test_crawl_skips_whitespace_only_documents(make_crawler) -> None:
    documents = {"blank": "\n  ", "real": newsml_for("Real")}
    crawler, _ = make_crawler(api(["blank", "real"], documents))

    articles = crawler.crawl()

    assert [article.title for article in articles] == ["Real"]


class ClosableSession:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_crawler_closes_session_it_created(monkeypatch) -> None:
    monkeypatch.setattr("aawire.core.crawler.requests.Session", ClosableSession)

    with Crawler({}) as crawler:
        assert crawler.session.closed is False

    assert crawler.session.closed is True


def test_crawler_leaves_injected_session_open() -> None:
    session = ClosableSession()

    with Crawler({}, session=session):
        pass

    assert session.closed is False
