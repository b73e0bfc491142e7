"""Sources of remote data, with an in-memory stand-in."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class Fetcher(Protocol):
    """Anything that can fetch the body found at a URL."""

    def fetch(self, url: str) -> bytes:
        """Return the body at *url*, raising an exception on failure."""


@dataclass
class MockFetcher:
    """Fetcher that serves canned responses and errors from memory."""

    responses: dict[str, bytes] = field(default_factory=dict)
    errors: dict[str, BaseException] = field(default_factory=dict)

    def fetch(self, url: str) -> bytes:
        """Raise the registered error, else return the registered body or b""."""
        if url in self.errors:
            raise self.errors[url]
        return self.responses.get(url, b"")

    def add_response(self, url: str, data: bytes) -> None:
        """Serve *data* for *url*."""
        self.responses[url] = data

    def add_error(self, url: str, error: BaseException) -> None:
        """Raise *error* whenever *url* is fetched."""
        self.errors[url] = error