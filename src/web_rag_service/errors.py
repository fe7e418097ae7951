from __future__ import annotations


class AnswerServiceError(Exception):
    """Base class for errors raised by the answer pipeline."""


class FetchTimeout(AnswerServiceError):
    """A single source fetch exceeded its timeout."""


class NetworkError(AnswerServiceError):
    """DNS, connection, TLS or read failure while fetching a single source."""


class ParseFailure(AnswerServiceError):
    """A fetched document could not be decoded or parsed at all."""


class UpstreamProtocolError(AnswerServiceError):
    """The completion provider did not hand back a stream."""
