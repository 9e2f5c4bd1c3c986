"""
Text utilities for aawire: tag stripping, summaries and title casing.
"""
import re

from bs4 import BeautifulSoup

# Attribution token some wire bodies are prefixed with
CREDIT_MARKER = '(DHA)'
CREDIT_TRIM_CHARS = ' \t\n\r\0\x0b-'
ELLIPSIS = '...'
SUMMARY_LENGTH = 150

_WORD_RE = re.compile(r"[^\W_]+(?:'[^\W_]+)?")


def strip_tags(text: str) -> str:
    """
    Remove markup tags from text.

    Args:
        text: Text that may contain HTML/XML tags

    Returns:
        The text content without tags
    """
    if not text:
        return ''
    return BeautifulSoup(text, 'html.parser').get_text()


def shorten(text: str, length: int) -> str:
    """
    Cut text at the end of a word so that it fits in ``length`` characters
    (plus the ellipsis).

    A cut landing inside a word drops that partial word. A cut landing on a
    word boundary keeps the last word. When the cut prefix has no space at
    all it is kept as is.

    Args:
        text: Text to shorten
        length: Maximum number of characters kept before the ellipsis

    Returns:
        The text unchanged if short enough, otherwise the shortened text
        ending with '...'
    """
    if len(text) <= length:
        return text

    prefix = text[:length]
    if not text[length].isspace():
        cut = prefix.rfind(' ')
        if cut > 0:
            prefix = prefix[:cut]
    shortened = prefix.rstrip(' \t\n\r\0\x0b') + ELLIPSIS

    if shortened.endswith(',' + ELLIPSIS):
        shortened = shortened[:-len(ELLIPSIS) - 1] + ELLIPSIS
    return shortened


def create_summary(text: str, length: int = SUMMARY_LENGTH) -> str:
    """
    Create a short summary of an article body with the wire credit stripped.

    Everything up to and including the first '(DHA)' marker is discarded,
    tags are removed and the result is shortened to ``length`` characters.

    Args:
        text: Article body, possibly containing markup
        length: Maximum summary length

    Returns:
        The summary
    """
    if CREDIT_MARKER in text:
        text = text.split(CREDIT_MARKER, 1)[1].strip(CREDIT_TRIM_CHARS)
    return shorten(strip_tags(text), length)


def title_case(text: str) -> str:
    """Convert text to "Title Case"."""
    return _WORD_RE.sub(lambda match: match.group(0)[:1].upper() + match.group(0)[1:].lower(), text)
