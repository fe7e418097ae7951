from __future__ import annotations

from dataclasses import dataclass

NOTHING_FOUND = "Nothing found"
NOT_AVAILABLE = "Not available"


@dataclass(frozen=True)
class Source:
    """
    A named document URL supplied by the caller as grounding context.

    full_content is always None on input; resolution returns a separate
    ResolvedSource instead of filling it in.
    """

    name: str
    url: str
    full_content: str | None = None


@dataclass(frozen=True)
class ResolvedSource:
    """
    A Source after the fetch/normalize pipeline ran.

    full_content is always set: normalized text, NOTHING_FOUND when extraction
    produced nothing, or NOT_AVAILABLE when fetching or parsing failed.
    """

    name: str
    url: str
    full_content: str

    @classmethod
    def from_source(cls, source: Source, full_content: str) -> ResolvedSource:
        return cls(name=source.name, url=source.url, full_content=full_content)

    @property
    def available(self) -> bool:
        return self.full_content not in (NOTHING_FOUND, NOT_AVAILABLE)


@dataclass(frozen=True)
class Prompt:
    """System context prompt plus the untouched user question."""

    system: str
    user: str

    def messages(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]
