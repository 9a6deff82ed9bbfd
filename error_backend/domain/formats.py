from __future__ import annotations

import math
import mimetypes
from collections.abc import Iterator
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

__all__ = [
    "SUPPORTED_MEDIA_TYPES",
    "FormatError",
    "UnknownFormatError",
    "ResolvedFormat",
    "AcceptEntry",
    "bare_media_type",
    "normalize_extension",
    "extension_for",
    "format_for",
    "parse_accept",
    "iter_accepted_media_types",
    "select_from_accept",
]

# Only these are honoured when picking from an Accept header.
SUPPORTED_MEDIA_TYPES = ("application/json", "text/html")

_QUALITY_MARKER = ";q="


# ------------------------
# Errors
# ------------------------
class FormatError(ValueError):
    """Base class for format resolution errors."""

    code: str = "invalid_format"


class UnknownFormatError(FormatError):
    code = "unknown_format"


# ------------------------
# Types
# ------------------------
class ResolvedFormat(BaseModel):
    """The media type we answer with and the file extension backing it.

    The extension always starts with a dot and ``.htm`` is stored as ``.html``.
    """

    model_config = ConfigDict(frozen=True)

    media_type: str
    extension: str

    @field_validator("extension")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_extension(value)


class AcceptEntry(NamedTuple):
    media_type: str
    quality: float


# ------------------------
# Extensions
# ------------------------

def bare_media_type(media_type: str) -> str:
    """Strip parameters and case from a media type: ``Text/HTML; charset=x`` -> ``text/html``."""
    return media_type.split(";", 1)[0].strip().lower()


def normalize_extension(ext: str) -> str:
    """Ensure a leading dot and map the legacy ``.htm`` to ``.html``."""
    if not ext.startswith("."):
        ext = "." + ext
    if ext == ".htm":
        ext = ".html"
    return ext


def extension_for(media_type: str) -> str:
    """Return the normalized file extension registered for `media_type`.

    Raises:
        UnknownFormatError: if the MIME registry has no extension for it.
    """
    bare = bare_media_type(media_type)
    ext = mimetypes.guess_extension(bare) if bare else None
    if not ext:
        raise UnknownFormatError(f"no file extension known for media type {media_type!r}")
    return normalize_extension(ext)


def format_for(media_type: str) -> ResolvedFormat:
    """Resolve a media type into a `ResolvedFormat`, keeping the type as given."""
    return ResolvedFormat(media_type=media_type.strip(), extension=extension_for(media_type))


# ------------------------
# Accept header
# ------------------------

def _parse_quality(raw: str) -> float:
    try:
        q = float(raw)
    except ValueError:
        return 1.0
    if not math.isfinite(q):
        return 1.0
    return min(max(q, 0.0), 1.0)


def parse_accept(header: str) -> list[AcceptEntry]:
    """Split an Accept header into entries ordered by descending quality.

    Each comma-separated token is trimmed and split on ``;q=``; a missing or
    unparsable weight counts as 1.0. The sort is stable, so entries with equal
    weight keep the order the client sent them in.
    """
    entries: list[AcceptEntry] = []
    for token in header.split(","):
        token = token.strip()
        media_type, marker, raw_q = token.partition(_QUALITY_MARKER)
        quality = _parse_quality(raw_q) if marker else 1.0
        entries.append(AcceptEntry(media_type, quality))
    return sorted(entries, key=lambda e: e.quality, reverse=True)


def iter_accepted_media_types(header: str) -> Iterator[str]:
    """Yield candidate media types from an Accept header, most preferred first."""
    for entry in parse_accept(header):
        yield entry.media_type


def select_from_accept(header: str) -> ResolvedFormat | None:
    """Return the first supported, resolvable media type in `header`, or None."""
    for media_type in iter_accepted_media_types(header):
        bare = bare_media_type(media_type)
        if bare not in SUPPORTED_MEDIA_TYPES:
            continue
        try:
            return ResolvedFormat(media_type=bare, extension=extension_for(bare))
        except UnknownFormatError:
            continue
    return None
