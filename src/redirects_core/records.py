"""Record lines of the form ``<digest>,<url>``."""

from __future__ import annotations

from dataclasses import dataclass

from .digest import DigestComputer, digest_bytes
from .redirect_html import render_redirect

FIELD_SEPARATOR = ","


@dataclass(frozen=True, slots=True)
class Record:
    """Single store record mapping a digest to a redirect target."""

    digest: str
    url: str

    def to_line(self) -> str:
        return f"{self.digest}{FIELD_SEPARATOR}{self.url}"

    @classmethod
    def from_url(cls, url: str, computer: DigestComputer | None = None) -> "Record":
        """Build a record whose digest is computed from the redirect document.

        URLs containing a double quote or a line break cannot be stored: the
        former breaks the redirect document, the latter the line format.
        """

        if '"' in url:
            raise ValueError(f"URL must not contain a double quote: {url!r}")
        if "\n" in url or "\r" in url:
            raise ValueError(f"URL must not contain a line break: {url!r}")
        content = render_redirect(url)
        digest = computer.digest_bytes(content) if computer is not None else digest_bytes(content)
        return cls(digest=digest, url=url)


def parse_record_line(line: str) -> Record | None:
    """Split a line on its first comma; None if there is no comma.

    Everything after the first comma is the URL, so URLs may contain commas.
    """

    digest, separator, url = line.partition(FIELD_SEPARATOR)
    if not separator:
        return None
    return Record(digest=digest, url=url)
