from __future__ import annotations

from pathlib import Path

from ..config import ConfigurationError
from ..domain.codes import DEFAULT_CODE, StatusCodeError, is_informational, parse_status_code
from ..domain.formats import ResolvedFormat, UnknownFormatError, format_for, select_from_accept
from ..domain.pages import ErrorPage, locate_error_page
from ..logging_conf import get_logger

logger = get_logger("service.pages")


def load_default_format(media_type: str) -> ResolvedFormat:
    """Resolve the configured default format once, at startup.

    Raises:
        ConfigurationError: if no file extension is known for `media_type`.
    """
    try:
        fmt = format_for(media_type)
    except UnknownFormatError as e:
        raise ConfigurationError(f"couldn't get file extension for default format: {e}") from e
    logger.info(
        "format.default",
        extra={"event": "format_default", "media_type": fmt.media_type, "extension": fmt.extension},
    )
    return fmt


# ------------------------
# Use-cases
# ------------------------

def resolve_format(*, explicit: str | None, accept: str | None, default: ResolvedFormat) -> ResolvedFormat:
    """Pick the media type and extension for a response.

    An explicit ``X-Format`` wins when it maps to an extension; otherwise the
    Accept header is searched for a supported type. Both paths end in
    `default` when nothing usable is found.
    """
    if explicit and explicit.strip():
        try:
            fmt = format_for(explicit)
        except UnknownFormatError as e:
            logger.warning(
                "format.unknown",
                extra={
                    "event": "format_unknown",
                    "error_code": e.code,
                    "requested": explicit,
                    "fallback": default.media_type,
                },
            )
            return default
        return fmt

    fmt = select_from_accept(accept or "")
    if fmt is None:
        return default
    logger.debug(
        "format.selected",
        extra={"event": "format_selected", "media_type": fmt.media_type, "extension": fmt.extension},
    )
    return fmt


def resolve_code(raw: str | None) -> int:
    """Return the status code requested by the proxy, 404 if it is unusable."""
    try:
        return parse_status_code(raw)
    except StatusCodeError as e:
        logger.warning(
            "code.invalid",
            extra={
                "event": "code_invalid",
                "error_code": e.code,
                "error_message": str(e),
                "fallback": DEFAULT_CODE,
            },
        )
        return DEFAULT_CODE


def find_page(*, root: Path, code: int, fmt: ResolvedFormat) -> ErrorPage | None:
    """Open the file serving `code` in `fmt`, logging every miss.

    Informational (1xx) codes cannot carry a page and always come back as None.
    The returned page's handle is owned by the caller.
    """
    if is_informational(code):
        logger.warning(
            "page.unservable",
            extra={"event": "page_unservable", "code": code, "extension": fmt.extension},
        )
        return None
    page, missed = locate_error_page(root, code, fmt.extension)
    for miss in missed:
        logger.info("page.missing", extra={"event": "page_missing", "path": str(miss), "code": code})
    if page is None:
        logger.warning(
            "page.not_found",
            extra={"event": "page_not_found", "code": code, "extension": fmt.extension},
        )
        return None
    logger.info(
        "page.served",
        extra={
            "event": "page_served",
            "code": code,
            "media_type": fmt.media_type,
            "extension": fmt.extension,
            "path": str(page.path),
        },
    )
    return page
