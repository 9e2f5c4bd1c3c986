import json
import xml.etree.ElementTree as ET

import pytest

from aawire.core.crawler import Crawler
from aawire.utils.http import RateLimiter


FULL_NEWSML = """<?xml version="1.0" encoding="UTF-8"?>
<newsMessage xmlns="http://iptc.org/std/nar/2006-10-01/">
  <header>
    <sent>2017-03-02T10:25:00Z</sent>
  </header>
  <itemSet>
    <newsItem guid="aa:text:20170302:7654321" version="1">
      <itemMeta>
        <itemClass qcode="ninat:text"/>
        <versionCreated>2017-03-02T10:20:30Z</versionCreated>
        <link rel="irel:seeAlso" residref="aa:picture:20170302:111" contenttype="image/jpeg"/>
        <link rel="irel:seeAlso" residref="aa:picture:20170302:222" contenttype="image/jpeg"/>
      </itemMeta>
      <contentMeta>
        <located type="cptype:city" qcode="aacity:6">
          <name xml:lang="en">Ankara</name>
          <name xml:lang="tr">Ankara (TR)</name>
        </located>
        <subject type="cpnat:abstract" qcode="aacat:1">
          <name xml:lang="en">Politics</name>
          <name xml:lang="tr">Politika</name>
        </subject>
        <subject type="cpnat:abstract" qcode="aacat:2">
          <name xml:lang="tr">Ekonomi</name>
        </subject>
        <headline>Meclis yeni yasayı kabul etti</headline>
      </contentMeta>
      <contentSet>
        <inlineXML contenttype="application/nitf+xml">
          <nitf xmlns="http://iptc.org/std/NITF/2006-10-18/">
            <body>
              <body.head>
                <abstract>Yasa tasarısı oy çokluğuyla kabul edildi.</abstract>
              </body.head>
              <body.content>ANKARA (AA) - Meclis yasayı <b>oy çokluğuyla</b> kabul etti.</body.content>
            </body>
          </nitf>
        </inlineXML>
      </contentSet>
    </newsItem>
  </itemSet>
</newsMessage>
"""

MINIMAL_NEWSML = """<newsMessage xmlns="http://iptc.org/std/nar/2006-10-01/">
  <itemSet>
    <newsItem>
      <itemMeta>
        <versionCreated>2021-12-31T22:15:00Z</versionCreated>
      </itemMeta>
      <contentMeta>
        <headline>Only a headline</headline>
      </contentMeta>
    </newsItem>
  </itemSet>
</newsMessage>
"""


def newsml_for(title: str) -> str:
    return MINIMAL_NEWSML.replace("Only a headline", title)


def search_body(ids, code=200):
    return json.dumps({
        "response": {"success": code == 200, "code": code, "message": ""},
        "data": {"result": [{"id": doc_id, "type": "text"} for doc_id in ids]},
    })


class DummyResponse:
    def __init__(self, text: str, status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code


class FakeSession:
    """Records requests and answers them from a handler function."""

    def __init__(self, handler) -> None:
        self.handler = handler
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.handler(method, url, kwargs)


class RecordingSleep:
    def __init__(self) -> None:
        self.pauses = []

    def __call__(self, seconds: float) -> None:
        self.pauses.append(seconds)


@pytest.fixture
def full_document():
    return ET.fromstring(FULL_NEWSML)


@pytest.fixture
def minimal_document():
    return ET.fromstring(MINIMAL_NEWSML)


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest.fixture
def make_crawler(sleeper):
    def factory(handler, **kwargs):
        session = FakeSession(handler)
        crawler = Crawler(
            {"userName": "user", "password": "secret"},
            session=session,
            rate_limiter=RateLimiter(delay=0.3, sleep=sleeper),
            **kwargs,
        )
        return crawler, session

    return factory
