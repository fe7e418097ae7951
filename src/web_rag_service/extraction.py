from __future__ import annotations

import logging
import re

import trafilatura
from lxml.etree import ParserError
from lxml.html import HTMLParser, document_fromstring

from web_rag_service import config
from web_rag_service.errors import ParseFailure
from web_rag_service.types import NOTHING_FOUND

logger = logging.getLogger(__name__)

# trafilatura reports malformed markup and short documents on its own loggers;
# only real errors from it belong in the service log.
logging.getLogger("trafilatura").setLevel(logging.ERROR)

_FOUR_OR_MORE_NEWLINES = re.compile(r"\n{4,}")
_THREE_OR_MORE_SPACES = re.compile(r" {3,}")
_NEWLINE_RUNS = re.compile(r"\n+(?:\s*\n)*")

# Recovering parser: malformed markup degrades, it does not raise
_HTML_PARSER = HTMLParser(recover=True, no_network=True)


def clean_text(text: str, max_chars: int = config.MAX_CONTENT_CHARS) -> str:
    """
    Flatten extracted article text into compact prompt-ready prose.

    The rules are applied in order and each one sees the output of the
    previous one:
      1. strip leading/trailing whitespace
      2. 4+ newlines -> 3 newlines
      3. each double newline -> one space
      4. 3+ spaces -> 2 spaces
      5. drop tabs
      6. any remaining newline run (blank lines included) -> 1 newline
      7. cut to max_chars
    """
    text = text.strip()
    text = _FOUR_OR_MORE_NEWLINES.sub("\n\n\n", text)
    text = text.replace("\n\n", " ")
    text = _THREE_OR_MORE_SPACES.sub("  ", text)
    text = text.replace("\t", "")
    text = _NEWLINE_RUNS.sub("\n", text)
    return text[:max_chars]


def _parse(html: str):
    """Build a full document tree, wrapping bare fragments in <html><body>."""
    try:
        return document_fromstring(html, parser=_HTML_PARSER)
    except ValueError:
        # lxml refuses str input that carries an XML encoding declaration
        try:
            return document_fromstring(html.encode("utf-8"), parser=_HTML_PARSER)
        except ParserError as e:
            raise ParseFailure(f"Could not parse HTML document: {e}") from e
    except ParserError as e:
        raise ParseFailure(f"Could not parse HTML document: {e}") from e


def normalize_html(html: str, max_chars: int = config.MAX_CONTENT_CHARS) -> str:
    """
    Extract the primary article text from raw HTML and clean it.

    Args:
        html: Raw page markup, possibly malformed.
        max_chars: Upper bound on the returned text length.

    Returns:
        Cleaned article text, or NOTHING_FOUND if the page has no primary content.

    Raises:
        ParseFailure: The markup could not be turned into a document tree at all.
    """
    if not html or not html.strip():
        return NOTHING_FOUND

    tree = _parse(html)
    # favor_precision keeps the link-text fallback from passing menus off as content
    extracted = trafilatura.extract(
        tree, include_comments=False, include_tables=True, favor_precision=True
    )
    if not extracted or not extracted.strip():
        logger.debug("No primary content found in %d chars of HTML", len(html))
        return NOTHING_FOUND

    return clean_text(extracted, max_chars=max_chars)
