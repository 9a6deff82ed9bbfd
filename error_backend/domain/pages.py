from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO, NamedTuple

from .codes import status_class

__all__ = [
    "CHUNK_SIZE",
    "ErrorPage",
    "candidate_paths",
    "locate_error_page",
    "iter_file",
]

CHUNK_SIZE = 64 * 1024


class ErrorPage(NamedTuple):
    """A page chosen for a response, with the handle that was opened to choose it."""

    path: Path
    handle: BinaryIO

    def close(self) -> None:
        self.handle.close()


def candidate_paths(root: Path, code: int, extension: str) -> list[Path]:
    """Return the files to try, in order: exact code, then the class wildcard.

    ``candidate_paths(Path("/www"), 503, ".html")`` gives
    ``/www/503.html`` and ``/www/5xx.html``.
    """
    return [
        root / f"{code}{extension}",
        root / f"{status_class(code)}{extension}",
    ]


def locate_error_page(root: Path, code: int, extension: str) -> tuple[ErrorPage | None, list[Path]]:
    """Open the page that answers `code` in `extension` format.

    Returns the first candidate that could be opened for reading (or None) and
    the candidates that failed before it. The caller owns the returned handle
    and must close it, normally by streaming it through `iter_file`.
    """
    missed: list[Path] = []
    for path in candidate_paths(root, code, extension):
        try:
            handle = path.open("rb")
        except OSError:
            missed.append(path)
            continue
        return ErrorPage(path, handle), missed
    return None, missed


def iter_file(handle: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the handle's bytes in chunks; the handle is closed when iteration ends."""
    with handle:
        while chunk := handle.read(chunk_size):
            yield chunk
