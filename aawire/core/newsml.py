"""
NewsML parsing for aawire.

Documents follow the IPTC NewsML-G2 schema (2006-10-01 namespace) with the
article text embedded as NITF under ``contentSet/inlineXML``. Each article
field is read with a compiled ElementTree path query; missing nodes become
empty strings.
"""
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from aawire.core.article import Article
from aawire.exceptions import MalformedDocumentError

# Configure logging
logger = logging.getLogger(__name__)

NEWSML_NAMESPACE = 'http://iptc.org/std/nar/2006-10-01/'
XML_NAMESPACE = 'http://www.w3.org/XML/1998/namespace'

NAMESPACES = {
    'n': NEWSML_NAMESPACE,
    'xml': XML_NAMESPACE,
}

# Published timestamps are shown in Turkey time
CREATED_AT_OFFSET = timedelta(hours=3)
CREATED_AT_FORMAT = '%d.%m.%Y %H:%M:%S'
IMAGE_FORMAT = 'web'

# NITF elements may or may not carry their own namespace
_INLINE_BODY = './/n:newsItem/n:contentSet/n:inlineXML/{*}nitf/{*}body'


@dataclass(frozen=True)
class FieldQuery:
    """
    A path query for one article field.

    ``first`` returns the text (or ``attribute``) of the first matching node
    and an empty string when nothing matches. ``all`` returns a value for
    every matching node.
    """
    path: str
    attribute: Optional[str] = None

    def _value(self, element: ET.Element) -> Optional[str]:
        if self.attribute is None:
            return ''.join(element.itertext())
        return element.get(self.attribute)

    def first(self, root: ET.Element) -> str:
        element = root.find(self.path, NAMESPACES)
        if element is None:
            return ''
        return self._value(element) or ''

    def all(self, root: ET.Element) -> List[str]:
        values = []
        for element in root.iterfind(self.path, NAMESPACES):
            value = self._value(element)
            if value is not None:
                values.append(value)
        return values


ARTICLE_FIELDS: Dict[str, FieldQuery] = {
    'title': FieldQuery('.//n:newsItem/n:contentMeta/n:headline'),
    'summary': FieldQuery(_INLINE_BODY + '/{*}body.head/{*}abstract'),
    'content': FieldQuery(_INLINE_BODY + '/{*}body.content'),
    'created_at': FieldQuery('.//n:newsItem/n:itemMeta/n:versionCreated'),
    'category': FieldQuery(".//n:subject/n:name[@xml:lang='tr']"),
    'city': FieldQuery(".//n:contentMeta/n:located[@type='cptype:city']/n:name[@xml:lang='tr']"),
    'images': FieldQuery(".//n:newsItem/n:itemMeta/n:link[@rel='irel:seeAlso']", attribute='residref'),
}


def parse_document(text: str) -> ET.Element:
    """
    Parse NewsML text into an element tree.

    Args:
        text: Raw XML text

    Returns:
        The root element

    Raises:
        MalformedDocumentError: If the text is not well-formed XML
    """
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedDocumentError(f"Could not parse NewsML document: {e}") from e


def format_created_at(value: str) -> str:
    """
    Format a versionCreated timestamp for display.

    The timestamp is read as UTC (naive values are assumed to be UTC),
    shifted forward three hours and formatted as ``DD.MM.YYYY HH:MM:SS``.

    Args:
        value: ISO-8601 timestamp

    Returns:
        The formatted timestamp, or an empty string for an empty value
    """
    raw = value.strip()
    if not raw:
        return ''
    value = raw[:-1] + '+00:00' if raw.endswith(('Z', 'z')) else raw
    try:
        created = datetime.fromisoformat(value)
    except ValueError as e:
        raise MalformedDocumentError(f"Invalid versionCreated timestamp: {raw!r}") from e

    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    created = created.astimezone(timezone.utc) + CREATED_AT_OFFSET
    return created.strftime(CREATED_AT_FORMAT)


def newsml_to_news(root: ET.Element, link_builder: Callable[[str, str], str]) -> Article:
    """
    Create an Article from a parsed NewsML document.

    Args:
        root: Root element of the NewsML document
        link_builder: Builds a document link from an id and a format token

    Returns:
        The mapped Article
    """
    images = ()
    picture_id = ARTICLE_FIELDS['images'].first(root)
    if picture_id:
        images = (link_builder(picture_id, IMAGE_FORMAT),)

    article = Article(
        title=ARTICLE_FIELDS['title'].first(root),
        summary=ARTICLE_FIELDS['summary'].first(root),
        content=ARTICLE_FIELDS['content'].first(root),
        created_at=format_created_at(ARTICLE_FIELDS['created_at'].first(root)),
        category=ARTICLE_FIELDS['category'].first(root),
        city=ARTICLE_FIELDS['city'].first(root),
        images=images,
    )
    logger.debug(f"Mapped NewsML document: {article.title}")
    return article


to_article = newsml_to_news
